"""Reads JUnit XML reports produced by CI jobs."""
from dataclasses import dataclass
from typing import List, Optional
from xml.etree import ElementTree as ET

from app.core.errors import CIResultParseError
from app.models.schemas import ResultStatus


@dataclass
class JUnitCase:
    name: str
    classname: Optional[str]
    time: Optional[float]
    status: ResultStatus
    message: Optional[str] = None
    system_out: Optional[str] = None
    system_err: Optional[str] = None

    @property
    def qualified_name(self) -> str:
        return f"{self.classname}.{self.name}" if self.classname else self.name

    def logs(self) -> Optional[str]:
        parts = [part for part in (self.message, self.system_out, self.system_err) if part]
        return "\n\n".join(parts) if parts else None


def _text(element: Optional[ET.Element]) -> Optional[str]:
    if element is None:
        return None
    text = (element.text or "").strip()
    return text or None


def _failure_message(element: ET.Element) -> str:
    pieces = [element.get("type"), element.get("message"), _text(element)]
    message = ": ".join(p.strip() for p in pieces if p and p.strip())
    return message or f"Reported as {element.tag} by CI"


def _parse_time(raw: Optional[str]) -> Optional[float]:
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def parse_junit_xml(document: str) -> List[JUnitCase]:
    """Parse ``<testsuites>``/``<testsuite>`` documents into flat test cases.

    A ``failure`` or ``error`` child makes the case FAIL, ``skipped`` makes it
    SKIPPED, anything else PASS.
    """
    try:
        root = ET.fromstring(document)
    except ET.ParseError as e:
        raise CIResultParseError(f"Invalid JUnit XML: {e}")

    if root.tag not in ("testsuites", "testsuite"):
        raise CIResultParseError(f"Unexpected root element <{root.tag}>, expected <testsuites> or <testsuite>")

    cases = []
    for element in root.iter("testcase"):
        name = element.get("name")
        if not name:
            raise CIResultParseError("Every <testcase> needs a name attribute")

        failure = element.find("failure")
        if failure is None:
            failure = element.find("error")
        skipped = element.find("skipped")

        if failure is not None:
            status, message = ResultStatus.FAIL, _failure_message(failure)
        elif skipped is not None:
            status, message = ResultStatus.SKIPPED, skipped.get("message") or _text(skipped)
        else:
            status, message = ResultStatus.PASS, None

        cases.append(
            JUnitCase(
                name=name,
                classname=element.get("classname"),
                time=_parse_time(element.get("time")),
                status=status,
                message=message,
                system_out=_text(element.find("system-out")),
                system_err=_text(element.find("system-err")),
            )
        )
    return cases
