from homefin.models import UserProfile
from homefin.session import Session, TokenStore


def test_token_store_round_trip(tmp_path) -> None:
    store = TokenStore(tmp_path / "nested" / "tokens.json")

    assert store.load() == (None, None)
    store.save("a", "r")
    assert store.load() == ("a", "r")
    store.clear()
    assert not store.path.exists()


def test_unreadable_token_file_is_ignored(tmp_path) -> None:
    path = tmp_path / "tokens.json"
    path.write_text("{broken", encoding="utf-8")

    assert TokenStore(path).load() == (None, None)


def test_session_writes_through_to_store(tmp_path) -> None:
    store = TokenStore(tmp_path / "tokens.json")
    session = Session.from_store(store)
    assert not session.is_authenticated

    session.set_tokens("a", "r")
    session.set_tokens("a2")

    assert Session.from_store(store).access_token == "a2"
    assert Session.from_store(store).refresh_token == "r"


def test_clear_forgets_everything(tmp_path) -> None:
    store = TokenStore(tmp_path / "tokens.json")
    session = Session(access_token="a", refresh_token="r", store=store)
    session.set_tokens("a", "r")
    session.profile = UserProfile(id="u1")

    session.clear()

    assert session.access_token is None
    assert session.refresh_token is None
    assert session.profile is None
    assert store.load() == (None, None)
