from app.models.schemas import ContentKind, Severity
from app.services.local_intel import match_local_intel


def test_official_bank_domain_and_otp_pattern():
    matches = match_local_intel(ContentKind.URL, "https://cbe.com.et/otp")

    assert ("domain", "Ethiopian Bank Domain", "cbe.com.et") in [(m.type, m.label, m.detail) for m in matches]
    otp = [m for m in matches if m.label == "OTP Request"]
    assert otp and otp[0].severity is Severity.HIGH


def test_shortcodes_and_urgent_bank_alert_in_sms():
    matches = match_local_intel(ContentKind.SMS, "Urgent: call 127 about your telebirr wallet")
    labels = {(m.type, m.label, m.detail) for m in matches}

    assert ("shortcode", "Telecom Shortcode Mention", "127") in labels
    assert ("pattern", "Urgent Bank Alert", "pattern") in labels


def test_domains_are_only_matched_for_url_input():
    matches = match_local_intel(ContentKind.SMS, "cbe.com.et")
    assert all(m.type != "domain" for m in matches)


def test_amharic_pin_request():
    matches = match_local_intel(ContentKind.SMS, "ፒን ቁጥርዎን ይላኩ")
    assert [m.label for m in matches] == ["Amharic PIN Request"]


def test_no_matches_for_plain_text():
    assert match_local_intel(ContentKind.EMAIL, "lunch at noon?") == []


def test_lookalike_host_is_not_a_bank_domain():
    matches = match_local_intel(ContentKind.URL, "https://notcbe.com.et/home")
    assert all(m.type != "domain" for m in matches)
