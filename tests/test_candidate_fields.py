import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from smarthr.normalize.candidate_fields import (  # noqa: E402
    DEFAULT_NAME,
    DEFAULT_PHONE,
    NAME_RULES,
    extract_candidate_fields,
    extract_email,
    extract_name,
    extract_phone,
)


def _fixed_clock() -> float:
    return 1700000000.0


class NameExtractionTests(unittest.TestCase):
    def test_name_rules_in_order(self):
        cases = [
            ("Priya Sharma\nBackend Engineer", "Priya Sharma"),
            ("JOHN DOE\njohn@example.com", "JOHN DOE"),
            ("Dr. Anita Rao\nanita@example.com", "Anita Rao"),
            ("Name: maria lopez\nmaria@example.com", "maria lopez"),
        ]
        for text, expected in cases:
            with self.subTest(text=text):
                self.assertEqual(extract_name(text), expected)

    def test_lines_with_email_digits_or_links_are_skipped(self):
        text = "jane.roe@example.com\nhttps://Portfolio Site\nRoom 42 Main Street\nJane Roe\n"
        self.assertEqual(extract_name(text), "Jane Roe")

    def test_only_first_ten_lines_are_scanned(self):
        filler = "\n".join(["summary"] * 10)
        self.assertEqual(extract_name(f"{filler}\nLate Name"), DEFAULT_NAME)

    def test_rules_are_named_and_ordered(self):
        self.assertEqual([rule.name for rule in NAME_RULES], ["proper_case", "all_caps", "honorific", "labeled"])


class PhoneExtractionTests(unittest.TestCase):
    def test_phone_rules(self):
        cases = [
            ("Call +1 (555) 123-4567 today", "+1 (555) 123-4567"),
            ("Phone: 555-123-4567", "555-123-4567"),
            ("Tel 12 34 56 78", "12 34 56 78"),
            ("Graduated in 2020", DEFAULT_PHONE),
        ]
        for text, expected in cases:
            with self.subTest(text=text):
                self.assertEqual(extract_phone(text), expected)

    def test_digits_inside_email_are_not_a_phone(self):
        self.assertEqual(extract_phone("reach me at user.555.123.4567@example.com"), DEFAULT_PHONE)


class EmailExtractionTests(unittest.TestCase):
    def test_first_email_wins(self):
        text = "a.person@example.org and backup@example.net"
        self.assertEqual(extract_email(text, _fixed_clock), "a.person@example.org")

    def test_missing_email_yields_placeholder(self):
        self.assertEqual(extract_email("no contact info", _fixed_clock), "anonymous-1700000000000@example.com")


class CandidateFieldsTests(unittest.TestCase):
    def test_text_without_any_signal_uses_defaults(self):
        profile = extract_candidate_fields("lorem ipsum dolor sit amet", clock=_fixed_clock)
        self.assertEqual(profile.name, "Unknown")
        self.assertEqual(profile.phone, "Not provided")
        self.assertEqual(profile.email, "anonymous-1700000000000@example.com")

    def test_empty_text_never_yields_empty_email(self):
        profile = extract_candidate_fields("", clock=_fixed_clock)
        self.assertTrue(profile.email)
        self.assertIn("@", profile.email)

    def test_full_header(self):
        text = "Priya Sharma\npriya.sharma@example.org | +91 98765 43210\n"
        profile = extract_candidate_fields(text, clock=_fixed_clock)
        self.assertEqual(profile.name, "Priya Sharma")
        self.assertEqual(profile.email, "priya.sharma@example.org")
        self.assertEqual(profile.phone, "+91 98765 43210")


if __name__ == "__main__":
    unittest.main()
