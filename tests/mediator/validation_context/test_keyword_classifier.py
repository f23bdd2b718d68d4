"""
Unit Tests for the Focus Keyword Classifier
"""

import pytest
import yaml

from mediator.validation_context.classifier import DEFAULT_KEYWORD_TABLE, KeywordClassifier


@pytest.fixture(scope="module")
def classifier():
    return KeywordClassifier.from_yaml()


class TestBundledTable:

    def test_table_exists(self):
        assert DEFAULT_KEYWORD_TABLE.exists()

    def test_covers_every_category(self, classifier):
        assert set(classifier.categories) == {
            "functionality", "performance", "security", "maintainability", "testability",
        }
        assert classifier.version == 1


class TestCategoriesFor:

    @pytest.mark.parametrize("text,expected", [
        ("Security check failed: SQL injection in login query", {"security"}),
        ("Performance below target on token refresh", {"performance"}),
        ("Response is slow and has a vulnerability", {"performance", "security"}),
        ("Unit tests missing for the parser", {"testability"}),
        ("存在安全漏洞", {"security"}),
        ("代码性能较差", {"performance"}),
        ("", set()),
    ])
    def test_classification(self, classifier, text, expected):
        assert classifier.categories_for(text) == expected

    def test_case_insensitive(self, classifier):
        assert classifier.categories_for("SECURITY REVIEW") == {"security"}

    def test_matches_at_word_start_only(self, classifier):
        assert classifier.categories_for("insecurely stored") == set()


class TestInsightTags:

    def test_english_phrases(self, classifier):
        tags = classifier.insight_tags("Input validation is missing and error handling leaks stack traces")
        assert tags == {"input_validation", "error_handling"}

    def test_chinese_phrases(self, classifier):
        assert classifier.insight_tags("缺少错误处理和输入验证") == {"error_handling", "input_validation"}

    def test_concurrency(self, classifier):
        assert "concurrency" in classifier.insight_tags("Possible race condition on session refresh")


class TestCustomTables:

    def test_from_dict(self):
        classifier = KeywordClassifier.from_dict({
            "version": 2,
            "categories": {"security": ["auth"]},
            "insights": {"token": "tokens"},
        })
        assert classifier.categories_for("auth bypass") == {"security"}
        assert classifier.insight_tags("token reuse") == {"tokens"}
        assert classifier.version == 2

    def test_unknown_category_rejected(self):
        with pytest.raises(ValueError, match="usability"):
            KeywordClassifier.from_dict({"categories": {"usability": ["ux"]}, "insights": {}})

    def test_sections_must_be_mappings(self):
        with pytest.raises(ValueError):
            KeywordClassifier.from_dict({"categories": ["security"]})

    def test_from_yaml_path(self, tmp_path):
        path = tmp_path / "keywords.yaml"
        path.write_text(yaml.safe_dump({"categories": {"performance": ["lag"]}, "insights": {}}))
        assert KeywordClassifier.from_yaml(path).categories_for("input lag") == {"performance"}
