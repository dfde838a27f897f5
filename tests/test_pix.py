import base64
from decimal import Decimal

from storefront.pix import (
    build_fallback_payload,
    card_last4,
    render_qr_base64,
    split_payer_name,
    strip_data_uri,
)

ORDER_ID = "3f2b1c9e-0d4a-4f6e-9a7b-1c2d3e4f5a6b"


def test_fallback_payload_embeds_order_and_amount():
    code = build_fallback_payload(ORDER_ID, Decimal("18.9"), "Acai Prime", "SAO PAULO")
    assert code.startswith("00020126580014br.gov.bcb.pix0136" + ORDER_ID)
    assert "52040000530398654018.90" in code
    assert "5802BR5913Acai Prime6009SAO PAULO" in code
    assert code.endswith("62070503***6304")


def test_fallback_payload_is_deterministic():
    a = build_fallback_payload(ORDER_ID, Decimal("22.90"), "Acai Prime", "SAO PAULO")
    b = build_fallback_payload(ORDER_ID, Decimal("22.90"), "Acai Prime", "SAO PAULO")
    assert a == b


def test_render_qr_base64_is_png_without_prefix():
    out = render_qr_base64("hello pix")
    assert not out.startswith("data:")
    assert base64.b64decode(out)[:8] == b"\x89PNG\r\n\x1a\n"


def test_strip_data_uri():
    assert strip_data_uri("data:image/png;base64,QUJD") == "QUJD"
    assert strip_data_uri("QUJD") == "QUJD"
    assert strip_data_uri("") == ""


def test_split_payer_name():
    assert split_payer_name("Maria da Silva") == ("Maria", "da Silva")
    assert split_payer_name("Maria") == ("Maria", "")
    assert split_payer_name("   ") == ("Cliente", "")
    assert split_payer_name(None) == ("Cliente", "")


def test_card_last4():
    assert card_last4("4111 1111 1111 1234") == "1234"
    assert card_last4("12") == "****"
    assert card_last4(None) == "****"
