import pytest

from wxbridge.uid import GROUP_TYPE, SEP_UID, USER_TYPE, UID


def test_user_string_form():
    assert str(UID.new_user("12345")) == "12345\x01u"


def test_group_string_form():
    assert str(UID.new_group("room")) == "room" + SEP_UID + GROUP_TYPE


def test_kind_predicates():
    user = UID.new_user("a")
    group = UID.new_group("b")
    assert user.is_user() and not user.is_group()
    assert group.is_group() and not group.is_user()
    assert user.uid_type == USER_TYPE


def test_default_is_empty():
    assert UID().is_empty()
    assert not UID.new_user("x").is_empty()


@pytest.mark.parametrize("uid", [UID.new_user("wxid_abc"), UID.new_group("chat@room"), UID("", "")])
def test_round_trip(uid):
    assert UID.parse(str(uid)) == uid


@pytest.mark.parametrize("text", ["plain", "a\x01b\x01c", ""])
def test_parse_rejects_bad_input(text):
    with pytest.raises(ValueError):
        UID.parse(text)


def test_equal_uids_hash_alike():
    assert len({UID.new_user("1"), UID.new_user("1"), UID.new_group("1")}) == 2