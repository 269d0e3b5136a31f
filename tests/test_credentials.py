from resale_admin.store.credentials import Credentials, resolve_credentials


def test_resolve_credentials_checks_keys_in_order():
    credentials = resolve_credentials({"token": "second", "authToken": "third", "access_token": "first"})
    assert credentials == Credentials(token="first")

    assert resolve_credentials({"token": "", "authToken": "third"}).token == "third"


def test_resolve_credentials_tolerates_missing_token():
    for store in (None, {}, {"access_token": "   "}, {"token": 42}):
        credentials = resolve_credentials(store)
        assert credentials.token is None
        assert not credentials.is_authenticated
        assert credentials.authorization_headers() == {}


def test_authorization_headers_use_bearer_scheme():
    assert Credentials(token="abc").authorization_headers() == {"Authorization": "Bearer abc"}
