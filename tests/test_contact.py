from dataclasses import asdict

from wxbridge.contact import ContactInfo


def test_fields_are_stored():
    contact = ContactInfo("uin1", "Alice", "friend")
    assert (contact.uin, contact.name, contact.remark) == ("uin1", "Alice", "friend")


def test_defaults_are_empty():
    contact = ContactInfo()
    assert asdict(contact) == {"uin": "", "name": "", "remark": ""}


def test_dict_round_trip():
    contact = ContactInfo(uin="42", name="Bob", remark="")
    assert ContactInfo(**asdict(contact)) == contact