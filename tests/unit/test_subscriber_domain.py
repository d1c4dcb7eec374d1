import pytest

from app.models.domain.errors import ValidationError
from app.models.domain.subscriber_domain import (
    NewsletterIssue,
    NewSubscriber,
    SubscriberEmail,
    SubscriberName,
    SubscriberStatus,
)


@pytest.mark.parametrize(
    "email",
    ["frank@test.com", "first.last@example.org", "user+tag@sub.example.co.uk"],
)
def test_valid_email_is_accepted(email):
    assert str(SubscriberEmail.parse(email)) == email


@pytest.mark.parametrize(
    "email",
    ["", "franktest.com", "@test.com", "frank@", "frank@@test.com"],
)
def test_invalid_email_is_rejected(email):
    with pytest.raises(ValidationError) as exc_info:
        SubscriberEmail.parse(email)

    assert exc_info.value.message == f"{email} email is not valid"


@pytest.mark.parametrize("email", ["a@localhost", "x@example.test", "user@mail.local"])
def test_email_on_non_public_domain_is_rejected(email):
    with pytest.raises(ValidationError):
        SubscriberEmail.parse(email)


def test_email_equality_delegates_to_value():
    assert SubscriberEmail.parse("frank@test.com") == SubscriberEmail.parse("frank@test.com")
    assert SubscriberEmail.parse("frank@test.com") != SubscriberEmail.parse("anna@test.com")


def test_name_valid():
    assert str(SubscriberName.parse("Frank")) == "Frank"


def test_name_of_255_chars_is_accepted():
    SubscriberName.parse("a" * 255)


def test_name_of_256_chars_is_accepted():
    SubscriberName.parse("a" * 256)


def test_name_of_257_chars_is_rejected():
    with pytest.raises(ValidationError):
        SubscriberName.parse("a" * 257)


def test_name_length_counts_graphemes_not_code_points():
    # "e" + combining acute accent is one grapheme made of two code points
    name = "e\u0301" * 256

    assert len(name) == 512
    SubscriberName.parse(name)


@pytest.mark.parametrize("name", ["", "   ", "\t\n"])
def test_blank_name_is_rejected(name):
    with pytest.raises(ValidationError) as exc_info:
        SubscriberName.parse(name)

    assert exc_info.value.message == f"{name} is not a valid subscriber name"


@pytest.mark.parametrize("char", list('/{}"><\\()'))
def test_name_with_forbidden_char_is_rejected(char):
    with pytest.raises(ValidationError):
        SubscriberName.parse(f"Frank{char}")


@pytest.mark.parametrize("status", list(SubscriberStatus))
def test_status_round_trip(status):
    assert SubscriberStatus.parse(status.encode()) is status


def test_status_encodings():
    assert SubscriberStatus.PENDING.encode() == "pending_confirmation"
    assert SubscriberStatus.CONFIRMED.encode() == "confirmed"
    assert SubscriberStatus.UNSUBSCRIBED.encode() == "unsubscribed"


@pytest.mark.parametrize("raw", ["", "pending", "CONFIRMED", "deleted"])
def test_unknown_status_is_rejected(raw):
    with pytest.raises(ValidationError) as exc_info:
        SubscriberStatus.parse(raw)

    assert exc_info.value.message == f"{raw} is not a valid subscriber status"


def test_status_predicates():
    assert SubscriberStatus.PENDING.is_pending()
    assert SubscriberStatus.CONFIRMED.is_confirmed()
    assert SubscriberStatus.UNSUBSCRIBED.is_unsubscribed()
    assert not SubscriberStatus.PENDING.is_confirmed()


def test_new_subscriber_validates_both_fields():
    with pytest.raises(ValidationError):
        NewSubscriber.parse("Frank", "not-an-email")

    with pytest.raises(ValidationError):
        NewSubscriber.parse("", "frank@test.com")


@pytest.mark.parametrize("title,html", [("", "<p>x</p>"), ("T", ""), ("  ", "<p>x</p>")])
def test_newsletter_issue_requires_title_and_html(title, html):
    with pytest.raises(ValidationError):
        NewsletterIssue(title=title, html=html).validate()


def test_newsletter_issue_valid():
    NewsletterIssue(title="T", html="<p>x</p>").validate()
