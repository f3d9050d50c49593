from app.services.domain_reputation import (
    OFFICIAL_DOMAINS,
    DomainReputationChecker,
    is_ethiopian_tld,
    levenshtein,
    similarity,
    trust_set,
)


def test_levenshtein_counts_unit_cost_edits():
    assert levenshtein("kitten", "sitting") == 3
    assert levenshtein("cbe.com.et", "cbe-login.com.et") == 6
    assert levenshtein("", "abc") == 3
    assert levenshtein("abc", "abc") == 0


def test_similarity_bounds():
    assert similarity("cbe.com.et", "cbe.com.et") == 1
    assert similarity("abcd", "wxyz") == 0
    assert similarity("", "cbe.com.et") == 0
    assert similarity("cbe-com.et", "cbe.com.et") == 0.9


def test_ethiopian_tld_detection():
    assert is_ethiopian_tld("cbe.com.et")
    assert is_ethiopian_tld("moe.gov.et")
    assert not is_ethiopian_tld("cbe-login.com")
    assert not is_ethiopian_tld("cbe.com.et.co")


def test_trust_set_appends_tenant_domains_once():
    domains = trust_set(["  Partner.example ", "cbe.com.et", ""])
    assert domains[: len(OFFICIAL_DOMAINS)] == OFFICIAL_DOMAINS
    assert domains[-1] == "partner.example"
    assert domains.count("cbe.com.et") == 1


def test_missing_hostname():
    result = DomainReputationChecker().check("", "cbe alert")
    assert result.domainRiskScore == 0
    assert result.isTrusted is False
    assert result.reasons == ("Domain missing",)


def test_trusted_domain_adds_no_risk():
    result = DomainReputationChecker().check("online.cbe.com.et", "https://online.cbe.com.et cbe")
    assert result.isTrusted is True
    assert result.matchedDomain == "cbe.com.et"
    assert result.domainRiskScore == 0
    assert result.reasons == ("Trusted official domain", "Domain age unknown")


def test_typosquat_on_foreign_tld_scores_both_rules():
    result = DomainReputationChecker().check("cbe.com.et.co", "http://cbe.com.et.co/login")
    assert result.isTrusted is False
    assert result.matchedDomain == "cbe.com.et"
    assert result.domainRiskScore == 50
    assert "Domain looks like a bank impersonation" in result.reasons
    assert "Non-Ethiopian TLD for bank-related content" in result.reasons


def test_long_lookalike_falls_below_similarity_threshold():
    # Exact edit distance keeps this at 0.5, well under the 0.75 cut-off.
    assert similarity("cbe-verify-login.com", "cbe.com.et") < 0.75

    result = DomainReputationChecker().check("cbe-verify-login.com", "http://cbe-verify-login.com")
    assert "Domain looks like a bank impersonation" not in result.reasons
    assert result.domainRiskScore == 15


def test_no_bank_keyword_means_no_typosquat_check():
    result = DomainReputationChecker().check("dashenbanksc.co", "http://dashenbanksc.co")
    # "dashen" is a bank keyword, so this one is checked
    assert "Domain looks like a bank impersonation" in result.reasons

    quiet = DomainReputationChecker().check("example.com", "http://example.com")
    assert quiet.domainRiskScore == 0
    assert quiet.reasons == ("Domain age unknown",)


def test_domain_age_provider_contributes_when_it_knows():
    class _NewDomain:
        def estimate(self, hostname):
            return 20, "Domain registered recently"

    result = DomainReputationChecker(age_provider=_NewDomain()).check("example.com", "http://example.com")
    assert result.domainRiskScore == 20
    assert "Domain age unknown" not in result.reasons


def test_score_is_clamped_to_100():
    class _Ancient:
        def estimate(self, hostname):
            return 500, "unused"

    result = DomainReputationChecker(age_provider=_Ancient()).check("cbe-com.et", "cbe")
    assert result.domainRiskScore == 100


def test_trust_requires_a_label_boundary():
    result = DomainReputationChecker().check("fakecbe.com.et", "https://fakecbe.com.et/login cbe")

    assert result.isTrusted is False
    assert result.matchedDomain is None
    assert "Trusted official domain" not in result.reasons
