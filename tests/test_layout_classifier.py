"""Tests for paystub layout identification."""

from pathlib import Path

import yaml

from crewbooks_ocr.extraction.layout_classifier import (
    DEFAULT_LAYOUT_RULES,
    IdentifyingRule,
    LayoutClassifier,
)
from crewbooks_ocr.extraction.records import LayoutTag


class TestIdentifyingRule:
    """Tests for a single identifying rule."""

    def test_all_phrases_required(self) -> None:
        rule = IdentifyingRule(("ENTERTAINMENT", "PARTNERS"))
        assert rule.matches("ENTERTAINMENT\nPARTNERS")
        assert not rule.matches("ENTERTAINMENT ONLY")

    def test_excluded_phrase(self) -> None:
        rule = IdentifyingRule(("PERIOD ENDING",), ("PAY PERIOD",))
        assert rule.matches("PERIOD ENDING 03/15/2024")
        assert not rule.matches("PERIOD ENDING 03/15/2024\nPAY PERIOD 03/01/2024")


class TestLayoutClassifier:
    """Tests for the LayoutClassifier class."""

    def setup_method(self) -> None:
        self.classifier = LayoutClassifier()

    def test_default_rules(self) -> None:
        assert list(self.classifier.rules) == [
            LayoutTag.ENTERTAINMENT_PARTNERS,
            LayoutTag.CAST_AND_CREW,
        ]

    def test_entertainment_partners(self, ep_stub: str) -> None:
        assert self.classifier.classify(ep_stub) is LayoutTag.ENTERTAINMENT_PARTNERS

    def test_cast_and_crew(self, cc_stub: str) -> None:
        assert self.classifier.classify(cc_stub) is LayoutTag.CAST_AND_CREW

    def test_unknown(self, unlabelled_stub: str) -> None:
        assert self.classifier.classify(unlabelled_stub) is LayoutTag.UNKNOWN

    def test_case_insensitive(self) -> None:
        assert (
            self.classifier.classify("cast and crew\npay period 03/15/2024")
            is LayoutTag.CAST_AND_CREW
        )

    def test_split_logo(self) -> None:
        text = "Entertainment\nep Partners\nWEEKLY"
        assert self.classifier.classify(text) is LayoutTag.ENTERTAINMENT_PARTNERS

    def test_period_ending_without_pay_period(self) -> None:
        assert (
            self.classifier.classify("PERIOD ENDING 03/15/2024")
            is LayoutTag.ENTERTAINMENT_PARTNERS
        )
        assert (
            self.classifier.classify("PERIOD ENDING 03/15/2024\nPAY PERIOD 03/01/2024")
            is LayoutTag.UNKNOWN
        )

    def test_first_layout_wins(self) -> None:
        text = "TIME REPORT SUMMARY\nCAST AND CREW"
        assert self.classifier.classify(text) is LayoutTag.ENTERTAINMENT_PARTNERS

    def test_only_header_lines_scanned(self) -> None:
        classifier = LayoutClassifier(scan_lines=3)
        text = "line\nline\nline\nCAST AND CREW"
        assert classifier.classify(text) is LayoutTag.UNKNOWN
        assert LayoutClassifier(scan_lines=4).classify(text) is LayoutTag.CAST_AND_CREW

    def test_empty_text(self) -> None:
        assert self.classifier.classify("") is LayoutTag.UNKNOWN
        assert self.classifier.classify(None) is LayoutTag.UNKNOWN


class TestLayoutFile:
    """Tests for loading layout rules from YAML."""

    def test_missing_file_uses_defaults(self) -> None:
        classifier = LayoutClassifier(Path("/nonexistent/layouts.yaml"))
        assert classifier.rules == DEFAULT_LAYOUT_RULES

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        empty = tmp_path / "layouts.yaml"
        empty.write_text("")
        assert LayoutClassifier(empty).rules == DEFAULT_LAYOUT_RULES

    def test_shipped_file_matches_defaults(self, config_dir: Path) -> None:
        classifier = LayoutClassifier(config_dir / "layouts.yaml")
        assert classifier.rules == DEFAULT_LAYOUT_RULES

    def test_custom_rules(self, tmp_path: Path) -> None:
        layouts = {
            "cast_and_crew": [{"all": ["crew payroll"]}],
            "entertainment_partners": [{"all": ["ep"], "none": ["crew"]}],
            "mystery_payroll": [{"all": ["ignored"]}],
        }
        layouts_file = tmp_path / "layouts.yaml"
        with open(layouts_file, "w") as f:
            yaml.dump(layouts, f, sort_keys=False)

        classifier = LayoutClassifier(layouts_file)
        assert list(classifier.rules) == [
            LayoutTag.CAST_AND_CREW,
            LayoutTag.ENTERTAINMENT_PARTNERS,
        ]
        assert classifier.classify("CREW PAYROLL\nEP") is LayoutTag.CAST_AND_CREW
        assert classifier.classify("EP STATEMENT") is LayoutTag.ENTERTAINMENT_PARTNERS
        assert classifier.classify("STATEMENT") is LayoutTag.UNKNOWN
