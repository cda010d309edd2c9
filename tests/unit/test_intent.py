"""Unit tests for recommendation-intent classification."""
from app.services.agent.intent import KeywordIntentClassifier


class TestKeywordIntentClassifier:
    """Test the keyword heuristic."""

    def test_chinese_keywords(self):
        classifier = KeywordIntentClassifier()
        assert classifier.is_recommendation_request("帮我推荐几道菜")
        assert classifier.is_recommendation_request("我想吃点辣的")
        assert classifier.is_recommendation_request("晚餐吃什么好")

    def test_english_keywords_are_case_insensitive(self):
        classifier = KeywordIntentClassifier()
        assert classifier.is_recommendation_request("Can you RECOMMEND something?")
        assert classifier.is_recommendation_request("Something healthy for lunch")

    def test_small_talk_is_not_a_request(self):
        classifier = KeywordIntentClassifier()
        assert not classifier.is_recommendation_request("你好")
        assert not classifier.is_recommendation_request("你是谁")

    def test_custom_keywords(self):
        """Test keywords are matched literally, not as regex."""
        classifier = KeywordIntentClassifier(keywords=["a+b"])
        assert classifier.is_recommendation_request("x a+b y")
        assert not classifier.is_recommendation_request("aab")

    def test_empty_keyword_list_never_matches(self):
        classifier = KeywordIntentClassifier(keywords=[""])
        assert not classifier.is_recommendation_request("推荐")
