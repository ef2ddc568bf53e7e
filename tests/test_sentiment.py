from campuspulse.sentiment import score_comment, tokenize


def test_blank_comment_scores_zero():
    assert score_comment(None) == 0
    assert score_comment("") == 0
    assert score_comment("   ") == 0


def test_positive_and_negative_words_cancel():
    assert score_comment("great session") == 1
    assert score_comment("Great pace and clear demos") == 2
    assert score_comment("good but slow") == 0
    assert score_comment("boring, confusing.") == -2


def test_score_is_clamped():
    assert score_comment("great great great great great") == 3
    assert score_comment("bad bad bad bad bad bad") == -3


def test_tokenize_splits_on_punctuation():
    assert tokenize("Useful/clear;FAST!") == ["useful", "clear", "fast"]
