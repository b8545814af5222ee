from gina.services.emotion import EmotionalContext, classify


def test_neutral_message_needs_no_empathy():
    emotion = classify("Hello, what is a good book to read?")

    assert emotion == EmotionalContext()
    assert emotion.annotate("Hello") == "Hello"


def test_each_category_is_detected_case_insensitively():
    assert classify("I am so SAD today").sadness
    assert classify("Work has me Overwhelmed").frustration
    assert classify("I can't cope with this").helplessness


def test_lost_counts_as_sadness_and_helplessness():
    emotion = classify("I feel so lonely and lost")

    assert emotion.needs_empathy
    assert emotion.labels == ["sadness", "helplessness"]
    assert not emotion.frustration


def test_annotation_lists_labels_in_fixed_order():
    emotion = classify("I'm frustrated and sad and struggling")

    assert emotion.labels == ["sadness", "frustration/stress", "helplessness"]
    assert emotion.annotate("hi") == (
        "[User appears to be experiencing: sadness, frustration/stress, helplessness] hi"
    )


def test_empty_message_is_neutral():
    assert not classify("").needs_empathy
    assert not classify(None).needs_empathy


def test_hopeless_and_neutral_examples():
    distressed = classify("I feel so hopeless and lost")
    neutral = classify("The weather is nice today")

    assert distressed.sadness and distressed.needs_empathy
    assert not any([neutral.needs_empathy, neutral.sadness, neutral.frustration, neutral.helplessness])
