"""검색 폼 입력란 탐색 - 순수 함수 매처.

페이지 HTML에서 텍스트 입력란을 문서 순서대로 나열하고,
필드별 키워드 우선순위로 입력란을 배정합니다.
휴리스틱 배정이 필수 필드를 모두 채우지 못하면 위치 기반 배정으로 전환합니다.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Callable, Optional, Sequence

from selectolax.parser import HTMLParser

from inmate_search.core.exceptions import FormNotFoundException


# type 속성 기준 - 페이지 스크립트(textTypes)와 동일해야 인덱스가 일치
TEXT_INPUT_TYPES: tuple[str, ...] = ("", "text", "search")
UNTYPED_INPUT_TYPES: tuple[str, ...] = ("", "text")

_MATCH_ATTRIBUTES = ("name", "element_id", "placeholder")

_NON_DOM_TAGS = ["noscript", "template"]


@dataclass(frozen=True)
class InputDescriptor:
    """텍스트 입력란 정보 (index는 텍스트 입력란 중 문서 순서)"""

    index: int
    input_type: str
    name: str = ""
    element_id: str = ""
    placeholder: str = ""

    def attribute(self, attribute: str) -> str:
        return getattr(self, attribute, "").lower()


@dataclass(frozen=True)
class FieldSpec:
    """채워야 할 논리 필드"""

    key: str
    keywords: tuple[str, ...]
    required: bool = True


DEFAULT_FIELD_SPECS: tuple[FieldSpec, ...] = (
    FieldSpec("first_name", ("firstname", "first_name", "first", "fname", "given")),
    FieldSpec("last_name", ("lastname", "last_name", "last", "lname", "surname", "family")),
    FieldSpec("location", ("state", "location", "county", "jurisdiction"), required=False),
)


FieldMatcher = Callable[[FieldSpec, Sequence[InputDescriptor], AbstractSet[int]], Optional[InputDescriptor]]


def parse_form_page(html: str) -> HTMLParser:
    """스크립트가 보는 DOM과 같은 기준으로 파싱

    JS가 켜진 페이지에서 noscript 내용은 텍스트일 뿐이고 template 내용은
    querySelectorAll로 닿지 않으므로 둘 다 제거해야 인덱스가 일치합니다.
    """
    parser = HTMLParser(html or "")
    parser.strip_tags(_NON_DOM_TAGS)
    return parser


def discover_text_inputs(html: str) -> list[InputDescriptor]:
    """HTML에서 텍스트 입력란 목록 추출 (문서 순서)"""
    parser = parse_form_page(html)
    descriptors: list[InputDescriptor] = []
    for node in parser.css("input"):
        attrs = node.attributes
        input_type = (attrs.get("type") or "").strip().lower()
        if input_type not in TEXT_INPUT_TYPES:
            continue
        descriptors.append(
            InputDescriptor(
                index=len(descriptors),
                input_type=input_type,
                name=(attrs.get("name") or "").strip(),
                element_id=(attrs.get("id") or "").strip(),
                placeholder=(attrs.get("placeholder") or "").strip(),
            )
        )
    return descriptors


def match_exact_attribute(
    spec: FieldSpec,
    inputs: Sequence[InputDescriptor],
    taken: AbstractSet[int],
) -> Optional[InputDescriptor]:
    """name/id가 키워드와 정확히 일치하는 입력란"""
    for keyword in spec.keywords:
        for descriptor in inputs:
            if descriptor.index in taken:
                continue
            if keyword in (descriptor.attribute("name"), descriptor.attribute("element_id")):
                return descriptor
    return None


def match_keyword_substring(
    spec: FieldSpec,
    inputs: Sequence[InputDescriptor],
    taken: AbstractSet[int],
) -> Optional[InputDescriptor]:
    """placeholder/name/id에 키워드가 포함된 입력란 (키워드 우선순위 순)"""
    for keyword in spec.keywords:
        for descriptor in inputs:
            if descriptor.index in taken:
                continue
            if any(keyword in descriptor.attribute(attr) for attr in _MATCH_ATTRIBUTES):
                return descriptor
    return None


HEURISTIC_MATCHERS: tuple[FieldMatcher, ...] = (
    match_exact_attribute,
    match_keyword_substring,
)


def assign_positionally(
    specs: Sequence[FieldSpec],
    inputs: Sequence[InputDescriptor],
) -> dict[str, InputDescriptor]:
    """type 없는(또는 text) 입력란을 문서 순서대로 필수 필드에 배정"""
    untyped = [d for d in inputs if d.input_type in UNTYPED_INPUT_TYPES]
    if len(untyped) < len(specs):
        raise FormNotFoundException(
            f"need {len(specs)} untyped text inputs for positional assignment, found {len(untyped)}",
            details={"text_inputs": len(inputs), "untyped_inputs": len(untyped)},
        )
    return {spec.key: descriptor for spec, descriptor in zip(specs, untyped)}


def assign_fields(
    inputs: Sequence[InputDescriptor],
    specs: Sequence[FieldSpec] = DEFAULT_FIELD_SPECS,
    matchers: Sequence[FieldMatcher] = HEURISTIC_MATCHERS,
) -> dict[str, InputDescriptor]:
    """필드 → 입력란 배정

    Raises:
        FormNotFoundException: 텍스트 입력란이 없거나 필수 필드를 채울 수 없는 경우
    """
    if not inputs:
        raise FormNotFoundException("page has no text inputs", details={"text_inputs": 0})

    assigned: dict[str, InputDescriptor] = {}
    taken: set[int] = set()
    for spec in specs:
        for matcher in matchers:
            match = matcher(spec, inputs, taken)
            if match is not None:
                assigned[spec.key] = match
                taken.add(match.index)
                break

    required = [spec for spec in specs if spec.required]
    if all(spec.key in assigned for spec in required):
        return assigned

    positional = assign_positionally(required, inputs)
    used = {d.index for d in positional.values()}
    for spec in specs:
        if spec.required or spec.key not in assigned:
            continue
        if assigned[spec.key].index not in used:
            positional[spec.key] = assigned[spec.key]
    return positional
