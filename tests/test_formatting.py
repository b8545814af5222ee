from gina.services.formatting import format_resources, has_resources, parse_resource


def test_resource_list_is_rebuilt():
    response = (
        "Here are some options to try:\n"
        "• **Calm App**: Guided meditation and sleep stories. Link: https://www.calm.com\n"
        "• **Crisis Text Line**: Free 24/7 support by text. https://www.crisistextline.org\n"
        "Take care of yourself."
    )

    assert format_resources(response) == (
        "Here are some helpful resources:\n\n"
        "• **Calm App**: Guided meditation and sleep stories\n"
        "  Link: https://www.calm.com\n\n"
        "• **Crisis Text Line**: Free 24/7 support by text\n"
        "  Link: https://www.crisistextline.org\n\n"
        "Take care of yourself."
    )


def test_text_before_intro_is_kept():
    response = (
        "That sounds hard. Here are some ideas: "
        "• **Headspace**: Mindfulness courses [Visit](https://www.headspace.com)"
    )

    assert format_resources(response) == (
        "That sounds hard. Here are some helpful resources:\n\n"
        "• **Headspace**: Mindfulness courses\n"
        "  Link: https://www.headspace.com"
    )


def test_plain_reply_is_unchanged():
    reply = "It's okay to take a break. Visit https://www.calm.com if you like."

    assert not has_resources(reply)
    assert format_resources(reply) == reply
    assert format_resources("") == ""


def test_colon_name_without_bold():
    resource = parse_resource("Calm App: Meditation app https://www.calm.com")

    assert resource.name == "Calm App"
    assert resource.description == "Meditation app"
    assert resource.link == "https://www.calm.com"


def test_url_scheme_colon_is_not_a_name_separator():
    resource = parse_resource("Visit https://www.calm.com for help")

    assert resource.name == "Resource"
    assert resource.description == "Visit"
    assert resource.link == "https://www.calm.com"


def test_bullet_without_description_is_dropped():
    assert parse_resource("**Calm App**: https://www.calm.com") is None
    assert parse_resource("   ") is None


def test_inline_resource_round_trip():
    response = (
        "Here are some resources: • **Calm App**: relaxation "
        "Link: https://example.com/calm Take care!"
    )

    formatted = format_resources(response)
    lines = [line.strip() for line in formatted.split("\n")]

    assert "• **Calm App**: relaxation" in lines
    assert "Link: https://example.com/calm" in lines
    assert formatted.endswith("Take care!")


def test_asterisk_lists_are_not_reformatted():
    reply = "* **Calm App**: Guided meditation. Link: https://www.calm.com"

    assert not has_resources(reply)
    assert format_resources(reply) == reply
