"""
지연 평가 값 (Lazy Value)
==========================

회로 합성(synthesis)에는 두 종류의 실행이 있다:

  - 구조 패스(structural pass): 키 생성처럼 witness 없이 테이블의 모양
    (셀 위치, 셀렉터, copy constraint)만 확정하는 단계
  - witness 패스: 실제 비밀 값으로 테이블을 채우는 단계

두 패스가 같은 합성 코드를 그대로 실행할 수 있도록, 셀에 들어갈 값은
Value로 감싼다. Value는 "known(구체적 값)" 또는 "unknown(자리표시자)" 둘 중
하나이며, 연산은 두 피연산자가 모두 known일 때만 즉시 계산되고
하나라도 unknown이면 결과도 unknown이 된다.

  | 왼쪽    | 오른쪽  | 결과      |
  |---------|---------|-----------|
  | known   | known   | known     |
  | known   | unknown | unknown   |
  | unknown | *       | unknown   |

한 번 known이 된 Value는 다시 unknown이 되지 않는다 (불변 객체).

Value가 아닌 피연산자는 known으로 취급한다. 단 왼쪽에 올 수 있는 것은 int뿐이다.
FR + Value 는 py_ecc 의 FQ 연산자가 TypeError 를 내므로 Value + FR 로 쓴다.

사용 예시:
    >>> a = Value.known(FR(1))
    >>> b = Value.known(FR(2))
    >>> (a + b).inner       # FR(3)
    >>> (a + Value.unknown()).is_unknown()   # True
"""


class Value:
    """known 또는 unknown 상태의 지연 값."""

    def __init__(self, inner, known):
        self._inner = inner
        self._known = known

    @classmethod
    def known(cls, inner):
        """구체적인 값을 감싼 known Value를 만든다."""
        return cls(inner, True)

    @classmethod
    def unknown(cls):
        """witness가 없는 자리표시자 Value를 만든다."""
        return cls(None, False)

    @classmethod
    def wrap(cls, value):
        """Value는 그대로, 그 외의 값은 known Value로 감싼다."""
        if isinstance(value, Value):
            return value
        return cls.known(value)

    def is_known(self):
        return self._known

    def is_unknown(self):
        return not self._known

    @property
    def inner(self):
        """known 값의 내용. unknown이면 None."""
        return self._inner

    def map(self, fn):
        """known이면 fn을 적용한 known Value, unknown이면 unknown."""
        if not self._known:
            return Value.unknown()
        return Value.known(fn(self._inner))

    def zip(self, other):
        """두 Value를 튜플 하나로 묶는다. 둘 다 known일 때만 known."""
        other = Value.wrap(other)
        if not (self._known and other._known):
            return Value.unknown()
        return Value.known((self._inner, other._inner))

    def evaluate(self, default=None):
        """known이면 내용을, unknown이면 default를 반환한다."""
        return self._inner if self._known else default

    def _combine(self, other, op):
        return self.zip(other).map(lambda pair: op(pair[0], pair[1]))

    def __add__(self, other):
        return self._combine(other, lambda x, y: x + y)

    def __radd__(self, other):
        return Value.wrap(other) + self

    def __sub__(self, other):
        return self._combine(other, lambda x, y: x - y)

    def __rsub__(self, other):
        return Value.wrap(other) - self

    def __mul__(self, other):
        return self._combine(other, lambda x, y: x * y)

    def __rmul__(self, other):
        return Value.wrap(other) * self

    def __neg__(self):
        return self.map(lambda x: -x)

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        if self._known != other._known:
            return False
        return not self._known or self._inner == other._inner

    __hash__ = None

    def __repr__(self):
        if self._known:
            return f"Value.known({self._inner!r})"
        return "Value.unknown()"
