"""페이지 컨텍스트에서 실행하는 스크립트 모음.

텍스트 입력란 판별 기준(type 속성)은 Python 쪽 입력란 탐색과 동일해야
인덱스가 일치합니다. 기준 목록은 arg(textTypes)로 전달합니다.
"""

OUTER_HTML_SCRIPT = "() => document.documentElement ? document.documentElement.outerHTML : ''"

CURRENT_URL_SCRIPT = "() => window.location.href"

# navigator.webdriver 등 자동화 흔적 숨기기
STEALTH_INIT_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
window.chrome = window.chrome || { runtime: {} };
Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
"""

FILL_FIELDS_SCRIPT = """
({ textTypes, assignments }) => {
  const inputs = Array.from(document.querySelectorAll('input')).filter((el) => {
    const type = (el.getAttribute('type') || '').trim().toLowerCase();
    return textTypes.includes(type);
  });
  let filled = 0;
  for (const { index, value } of assignments) {
    const el = inputs[index];
    if (!el) continue;
    el.focus();
    el.value = value;
    // 값 대입만으로는 리스너가 동작하지 않으므로 이벤트를 직접 발생시킴
    el.dispatchEvent(new Event('input', { bubbles: true }));
    el.dispatchEvent(new Event('change', { bubbles: true }));
    filled += 1;
  }
  return filled;
}
"""

# 제출 후보 기준 - Python 쪽 제출 버튼 선택(submitTypes)과 동일해야 controlIndex가 일치
SUBMIT_FORM_SCRIPT = """
({ textTypes, submitTypes, anchorIndex, controlIndex }) => {
  const typeOf = (el) => (el.getAttribute('type') || '').trim().toLowerCase();
  const inputs = Array.from(document.querySelectorAll('input')).filter((el) => textTypes.includes(typeOf(el)));
  const controls = Array.from(document.querySelectorAll('button, input')).filter((el) => (
    el.tagName === 'BUTTON' ? typeOf(el) !== 'reset' : submitTypes.includes(typeOf(el))
  ));
  const anchor = inputs[anchorIndex] || null;
  const form = (anchor && anchor.form) || document.querySelector('form');

  const attempts = [
    ['labeled', () => {
      if (controlIndex === null || controlIndex === undefined) return false;
      const el = controls[controlIndex];
      if (!el || el.disabled) return false;
      el.click();
      return true;
    }],
    ['submit_type', () => {
      const scope = form || document;
      const el = Array.from(scope.querySelectorAll('button, input'))
        .find((c) => typeOf(c) === 'submit' && !c.disabled);
      if (!el) return false;
      el.click();
      return true;
    }],
    ['form', () => {
      if (!form) return false;
      form.submit();
      return true;
    }],
  ];

  for (const [method, run] of attempts) {
    try {
      if (run()) return method;
    } catch (e) {
      // 다음 경로 시도
    }
  }
  return null;
}
"""
