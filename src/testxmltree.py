import pytest

from errors import ReportSyntaxError
from xmltree import TEXT_KEY, parse_xml_tree


def test_root_is_unwrapped_and_tags_lowercased():
    tree = parse_xml_tree(b"<Report><PersonalInfo><Name>  John   Doe </Name></PersonalInfo></Report>")
    assert tree == {"personalinfo": {"name": "John Doe"}}


def test_repeated_children_become_list_in_source_order():
    tree = parse_xml_tree(
        b"<r><accounts><account><n>1</n></account><account><n>2</n></account></accounts></r>"
    )
    assert tree["accounts"]["account"] == [{"n": "1"}, {"n": "2"}]


def test_single_child_is_not_wrapped():
    tree = parse_xml_tree(b"<r><accounts><account><n>1</n></account></accounts></r>")
    assert tree["accounts"]["account"] == {"n": "1"}


def test_attributes_share_the_element_mapping():
    tree = parse_xml_tree(b'<r><account Type="credit card" status="closed"/></r>')
    assert tree == {"account": {"type": "credit card", "status": "closed"}}


def test_text_next_to_attributes_is_kept():
    tree = parse_xml_tree(b'<r><score version="2">750</score></r>')
    assert tree["score"] == {"version": "2", TEXT_KEY: "750"}


def test_namespaces_are_dropped():
    tree = parse_xml_tree(b'<r xmlns="urn:bureau:v1"><Name>Asha</Name></r>')
    assert tree == {"name": "Asha"}


def test_empty_element_is_empty_string():
    assert parse_xml_tree(b"<r><pan/></r>") == {"pan": ""}


def test_byte_order_mark_is_accepted():
    assert parse_xml_tree(b"\xef\xbb\xbf<r><a>1</a></r>") == {"a": "1"}


@pytest.mark.parametrize("raw", [b"<r><a></r>", b"not xml at all", b"<r>\xff\xfe</r>", b"   "])
def test_bad_documents_raise_syntax_error(raw):
    with pytest.raises(ReportSyntaxError) as excinfo:
        parse_xml_tree(raw)
    assert excinfo.value.kind == "syntax-error"
    assert excinfo.value.message


def test_child_replaces_attribute_of_same_name():
    tree = parse_xml_tree(b'<r><a type="x"><type>y</type></a></r>')
    assert tree == {"a": {"type": "y"}}


def test_repeated_child_after_attribute_of_same_name():
    tree = parse_xml_tree(b'<r><a type="x"><type>y</type><type>z</type></a></r>')
    assert tree == {"a": {"type": ["y", "z"]}}


def test_schema_instance_attributes_are_dropped():
    tree = parse_xml_tree(
        b'<r xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">'
        b'<account xsi:type="HomeLoanT" status="open"/></r>'
    )
    assert tree == {"account": {"status": "open"}}
