import pytest

from core.i18n import available_locales, get_locale, normalize_locale, set_locale, t
from scripts.validate_po import check_catalogs


def test_available_locales():
    assert {"en", "pt_BR", "zh_Hans"} <= set(available_locales())


@pytest.mark.parametrize("raw,expected", [("pt-br", "pt_BR"), ("EN", "en"), ("zh_hans", "zh_Hans"), (None, "en")])
def test_normalize_locale(raw, expected):
    assert normalize_locale(raw) == expected


def test_translation_per_locale():
    assert t("order.paid") == "Order paid."
    set_locale("pt_BR")
    assert get_locale() == "pt_BR"
    assert t("webhook.received", entity="charge", action="paid") != "Webhook received: charge.paid"
    set_locale("zh_Hans")
    assert t("charge.not_found") != "Charge not found"


def test_unknown_locale_and_key_fall_back():
    set_locale("fr")
    assert t("charge.paid") == "Charge paid."
    assert t("no.such.key") == "no.such.key"


def test_missing_format_params_return_template():
    assert "{value}" in t("validation.param.invalid")


def test_catalogs_cover_every_used_key():
    assert check_catalogs() == []
