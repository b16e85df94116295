from onboarding.core.masking import mask_account_number, mask_routing_number, mask_ssn, mask_trailing


def test_mask_trailing_keeps_last_digits():
    assert mask_trailing("123456789", 4) == "*****6789"


def test_mask_trailing_empty_and_missing():
    assert mask_trailing("", 4) == ""
    assert mask_trailing(None, 4) == ""


def test_mask_trailing_preserves_length():
    value = "000123456789"
    assert len(mask_trailing(value, 4)) == len(value)


def test_mask_trailing_short_value_is_not_padded():
    assert mask_trailing("12", 4) == "12"


def test_mask_trailing_zero_visible_masks_everything():
    assert mask_trailing("1234", 0) == "****"


def test_sensitive_field_helpers():
    assert mask_ssn("123-45-6789") == "*******6789"
    assert mask_account_number("000123456789") == "********6789"
    assert mask_routing_number("021000021") == "*******21"
