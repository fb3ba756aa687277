import pytest

from edge_guardian.utils.data_uri import decode_data_uri, is_data_uri


def test_decode_data_uri(image_data_uri, jpeg_bytes):
    data, content_type = decode_data_uri(image_data_uri)
    assert data == jpeg_bytes
    assert content_type == "image/jpeg"


@pytest.mark.parametrize("value", ["not-a-uri", "data:image/png,abc", "https://example.com/x.jpg"])
def test_decode_rejects_non_base64_data_uris(value):
    assert not is_data_uri(value)
    with pytest.raises(ValueError, match="Invalid data URI"):
        decode_data_uri(value)
