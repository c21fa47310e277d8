"""검색 폼 제출 버튼 선택 - 순수 함수.

제출 후보(button, type=submit/image 입력)를 문서 순서대로 나열하고,
키워드 우선순위대로 라벨의 단어와 정확히 일치하는 첫 컨트롤을 고릅니다.
부분 문자열 매칭은 "go"가 "Category"/"Logout"에 걸리므로 쓰지 않습니다.
반환한 index는 페이지 스크립트의 후보 목록 인덱스와 같습니다.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence

from selectolax.parser import HTMLParser, Node

from inmate_search.utils.text import normalize_whitespace

from .field_matching import TEXT_INPUT_TYPES, parse_form_page


# type 속성 기준 - 페이지 스크립트(submitTypes)와 동일해야 인덱스가 일치
SUBMIT_INPUT_TYPES: tuple[str, ...] = ("submit", "image")

_WORD_PATTERN = re.compile(r"[a-z0-9]+")


@dataclass(frozen=True)
class SubmitControl:
    """제출 후보 컨트롤 (index는 후보 중 문서 순서)"""

    index: int
    label: str
    disabled: bool = False
    form_id: Optional[int] = None

    @property
    def words(self) -> tuple[str, ...]:
        return tuple(_WORD_PATTERN.findall(self.label.lower()))


def _input_type(node: Node) -> str:
    return (node.attributes.get("type") or "").strip().lower()


def _form_id(node: Node) -> Optional[int]:
    parent = node.parent
    while parent is not None:
        if parent.tag == "form":
            return parent.mem_id
        parent = parent.parent
    return None


def _label(node: Node) -> str:
    attrs = node.attributes
    candidates = (
        normalize_whitespace(node.text(deep=True, separator=" ")) if node.tag == "button" else "",
        attrs.get("value"),
        attrs.get("aria-label"),
        attrs.get("title"),
        attrs.get("alt"),
    )
    for candidate in candidates:
        if candidate and candidate.strip():
            return candidate.strip()
    return ""


def scan_form_controls(parser: HTMLParser) -> tuple[list[Optional[int]], list[SubmitControl]]:
    """텍스트 입력란별 소속 form과 제출 후보 목록을 한 번에 수집

    Returns:
        (텍스트 입력란 순서대로의 form id 목록, 제출 후보 목록)
    """
    input_forms: list[Optional[int]] = []
    controls: list[SubmitControl] = []
    if parser.root is None:
        return input_forms, controls

    for node in parser.root.traverse():
        if node.tag == "input":
            input_type = _input_type(node)
            if input_type in TEXT_INPUT_TYPES:
                input_forms.append(_form_id(node))
                continue
            if input_type not in SUBMIT_INPUT_TYPES:
                continue
        elif node.tag == "button":
            if _input_type(node) == "reset":
                continue
        else:
            continue

        controls.append(
            SubmitControl(
                index=len(controls),
                label=_label(node),
                disabled="disabled" in node.attributes,
                form_id=_form_id(node),
            )
        )

    return input_forms, controls


def pick_submit_control(html: str, anchor_index: int, keywords: Sequence[str]) -> Optional[int]:
    """라벨로 제출 버튼 선택

    범위는 기준 입력란이 속한 form (없으면 첫 form, 그것도 없으면 문서 전체).

    Returns:
        제출 후보 index, 일치하는 컨트롤이 없으면 None
    """
    parser = parse_form_page(html)
    input_forms, controls = scan_form_controls(parser)

    scope: Optional[int] = None
    if 0 <= anchor_index < len(input_forms):
        scope = input_forms[anchor_index]
    if scope is None:
        first_form = parser.css_first("form")
        scope = first_form.mem_id if first_form is not None else None

    in_scope = [
        control for control in controls
        if not control.disabled and (scope is None or control.form_id == scope)
    ]
    for keyword in keywords:
        keyword = keyword.lower()
        for control in in_scope:
            if keyword in control.words:
                return control.index
    return None
