import pytest

from app.core.errors import CIResultParseError
from app.models.schemas import ResultStatus
from app.services.junit_parser import parse_junit_xml


def test_parses_single_suite():
    cases = parse_junit_xml(
        """<testsuite name="api">
             <testcase classname="api.orders" name="creates order" time="0.25">
               <system-out>POST /orders 201</system-out>
             </testcase>
             <testcase classname="api.orders" name="rejects empty cart">
               <error type="KeyError" message="items"/>
             </testcase>
             <testcase name="pays with voucher"><skipped message="no voucher service"/></testcase>
           </testsuite>"""
    )

    assert [c.status for c in cases] == [ResultStatus.PASS, ResultStatus.FAIL, ResultStatus.SKIPPED]
    assert cases[0].time == 0.25
    assert cases[0].logs() == "POST /orders 201"
    assert cases[0].qualified_name == "api.orders.creates order"
    assert cases[1].message == "KeyError: items"
    assert cases[2].message == "no voucher service"
    assert cases[2].qualified_name == "pays with voucher"


def test_parses_nested_suites():
    cases = parse_junit_xml(
        """<testsuites>
             <testsuite name="a"><testcase name="one"/></testsuite>
             <testsuite name="b"><testsuite name="c"><testcase name="two"/></testsuite></testsuite>
           </testsuites>"""
    )
    assert [c.name for c in cases] == ["one", "two"]


def test_failure_without_text_gets_a_message():
    cases = parse_junit_xml('<testsuite><testcase name="x"><failure/></testcase></testsuite>')
    assert cases[0].status == ResultStatus.FAIL
    assert cases[0].message == "Reported as failure by CI"


@pytest.mark.parametrize(
    "document",
    [
        "not xml at all",
        "<testsuite><testcase name='x'></testsuite>",
        "<report><testcase name='x'/></report>",
        "<testsuite><testcase/></testsuite>",
    ],
)
def test_rejects_malformed_reports(document):
    with pytest.raises(CIResultParseError):
        parse_junit_xml(document)
