import unittest

from portfoliowatch.extraction.name_filter import (
    MAX_NAME_LENGTH,
    MAX_NAME_TOKENS,
    MIN_NAME_LENGTH,
    STOPLIST,
    clean_name,
    normalize_text,
    rejection_reason,
)


class TestNormalize(unittest.TestCase):
    def test_collapses_whitespace_and_newlines(self):
        self.assertEqual(normalize_text("  Eigen\n   Layer \t"), "Eigen Layer")

    def test_strips_punctuation_but_keeps_hyphen_and_period(self):
        self.assertEqual(normalize_text("Foo & Bar!"), "Foo Bar")
        self.assertEqual(normalize_text("dYdX-v4 Labs."), "dYdX-v4 Labs.")


class TestCleanName(unittest.TestCase):
    def test_accepts_company_names(self):
        self.assertEqual(clean_name("Uniswap"), "Uniswap")
        self.assertEqual(clean_name("  Eigen\n  Layer  "), "Eigen Layer")

    def test_rejects_non_strings_and_empty(self):
        for raw in (None, 42, "", "   ", ["Uniswap"]):
            self.assertIsNone(clean_name(raw))

    def test_rejects_by_length(self):
        self.assertIsNone(clean_name("Q"))
        self.assertIsNone(clean_name("A" * (MAX_NAME_LENGTH + 1)))
        self.assertEqual(clean_name("A" * MAX_NAME_LENGTH), "A" * MAX_NAME_LENGTH)

    def test_rejects_too_many_tokens(self):
        self.assertIsNone(clean_name("One Two Three Four Five"))
        self.assertEqual(clean_name("One Two Three Four"), "One Two Three Four")

    def test_rejects_stoplist_case_insensitively(self):
        for word in STOPLIST:
            self.assertIsNone(clean_name(word), word)
            self.assertIsNone(clean_name(word.upper()), word)
            self.assertIsNone(clean_name(f"  {word.title()}  "), word)

    def test_rejects_navigation_phrases(self):
        self.assertEqual(rejection_reason("Follow us on X"), "navigation")
        self.assertIsNone(clean_name("Privacy Policy"))
        self.assertIsNone(clean_name("Read More News"))

    def test_rejects_links_domains_and_handles(self):
        self.assertIsNone(clean_name("https://paradigm.xyz"))
        self.assertIsNone(clean_name("@paradigm"))
        self.assertIsNone(clean_name("mirror.xyz"))
        self.assertIsNone(clean_name("www.example"))
        self.assertIsNone(clean_name("Example.io"))

    def test_rejects_names_that_start_like_a_url(self):
        self.assertEqual(rejection_reason("httpx", "httpx"), "link")
        self.assertIsNone(clean_name("HTTP Labs"))
        self.assertEqual(clean_name("Sushi HTTP"), "Sushi HTTP")

    def test_rejects_numbers(self):
        self.assertEqual(rejection_reason("2024"), "numeric")
        self.assertIsNone(clean_name(" 100 "))

    def test_rejects_descriptive_copy(self):
        self.assertIsNone(clean_name("Solana Protocol"))
        self.assertIsNone(clean_name("Decentralized Exchange"))
        self.assertIsNone(clean_name("Infrastructure"))

    def test_accepted_names_respect_bounds(self):
        samples = [
            "Uniswap", "  Optimism ", "A & B Capital Partners", "EigenLayer\n", "Aave v3",
            "Lido Finance", "x", "Talk to our team about anything", "Zora", "1inch",
            "Celestia!!", "The Graph", "Flashbots - MEV", "K", "Offchain Labs",
        ]
        for raw in samples:
            name = clean_name(raw)
            if name is None:
                continue
            self.assertGreaterEqual(len(name), MIN_NAME_LENGTH)
            self.assertLessEqual(len(name), MAX_NAME_LENGTH)
            self.assertLessEqual(len(name.split(" ")), MAX_NAME_TOKENS)

    def test_is_deterministic(self):
        self.assertEqual(clean_name("Offchain  Labs"), clean_name("Offchain  Labs"))


if __name__ == "__main__":
    unittest.main()
