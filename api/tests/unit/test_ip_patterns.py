from app.shared.utils.ip_patterns import is_ip_allowed, patterns_to_regex


def test_empty_whitelist_allows_everything():
    assert patterns_to_regex("") is None
    assert is_ip_allowed("10.0.0.1", None)


def test_exact_and_wildcard_patterns():
    whitelist = patterns_to_regex("67.118.0.1 255.255.*.*")
    assert is_ip_allowed("67.118.0.1", whitelist)
    assert is_ip_allowed("255.255.12.200", whitelist)
    assert not is_ip_allowed("67.118.0.2", whitelist)
    assert not is_ip_allowed("255.254.1.1", whitelist)


def test_match_is_anchored():
    whitelist = patterns_to_regex("1.1.1.1")
    assert not is_ip_allowed("11.1.1.10", whitelist)
    assert not is_ip_allowed("1.1.1.1.5", whitelist)


def test_wildcard_only_matches_valid_octets():
    whitelist = patterns_to_regex("10.0.0.*")
    assert is_ip_allowed("10.0.0.255", whitelist)
    assert not is_ip_allowed("10.0.0.256", whitelist)


def test_missing_ip_is_rejected_when_whitelist_set():
    assert not is_ip_allowed(None, patterns_to_regex("10.0.0.*"))
