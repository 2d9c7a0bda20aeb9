from medicare.payments import metadata as meta


def test_extract_metadata_from_session():
    session = {"metadata": {"order_id": "o-1", "user_id": "u-1"}}
    assert meta.extract_metadata_from_session(session) == ("o-1", "u-1")


def test_extract_metadata_guest_and_missing():
    assert meta.extract_metadata_from_session({"metadata": {"order_id": "o-1", "user_id": ""}}) == ("o-1", None)
    assert meta.extract_metadata_from_session({}) == (None, None)


def test_extract_customer_details():
    session = {"customer_details": {"email": "jane@example.com", "name": "Jane"}}
    assert meta.extract_customer_details(session) == ("jane@example.com", "Jane")
    assert meta.extract_customer_details({"customer_details": None}) == (None, None)
