"""
게이트 다항식 표현식 (Expression)
===================================

커스텀 게이트는 테이블 셀에 대한 다항식 항등식으로 선언된다.
예: 덧셈 게이트  s · (a + b − c) = 0

여기서 각 항은 "어느 열(column)의 어느 상대 행(rotation)" 을 읽는
질의(query)이고, 게이트가 활성화된 모든 행에서 평가되어 0이어야 한다.

**표현식 노드**:
  | 노드      | 의미                               | 차수            |
  |-----------|------------------------------------|-----------------|
  | Constant  | 상수 c                             | 0               |
  | Selector  | 셀렉터 s (행마다 0/1)              | 1               |
  | Query     | 열 col 의 (현재 행 + rotation) 값  | 1               |
  | Negated   | −e                                 | deg(e)          |
  | Sum       | e1 + e2                            | max             |
  | Product   | e1 · e2                            | deg(e1)+deg(e2) |
  | Scaled    | e · c                              | deg(e)          |

평가는 resolver 객체에 위임한다. resolver는 다음 두 메서드를 제공한다:
    selector(sel) -> FR
    query(column, rotation) -> FR

사용 예시:
    >>> expr = s * (a + b - c)
    >>> expr.evaluate(row_resolver) == FR(0)
"""

from fibzk.plonk.field import to_field


class Rotation:
    """현재 행 기준 상대 오프셋."""

    @staticmethod
    def cur():
        return 0

    @staticmethod
    def next():
        return 1

    @staticmethod
    def prev():
        return -1


class Expression:
    """다항식 표현식의 공통 기반 클래스."""

    def evaluate(self, resolver):
        raise NotImplementedError

    def degree(self):
        raise NotImplementedError

    def queries(self):
        """표현식이 읽는 (column, rotation) 질의 목록."""
        return []

    def __add__(self, other):
        return Sum(self, _lift(other))

    def __radd__(self, other):
        return Sum(_lift(other), self)

    def __sub__(self, other):
        return Sum(self, Negated(_lift(other)))

    def __rsub__(self, other):
        return Sum(_lift(other), Negated(self))

    def __mul__(self, other):
        if isinstance(other, Expression):
            return Product(self, other)
        return Scaled(self, to_field(other))

    def __rmul__(self, other):
        return Scaled(self, to_field(other))

    def __neg__(self):
        return Negated(self)


def _lift(value):
    if isinstance(value, Expression):
        return value
    return Constant(value)


class Constant(Expression):
    def __init__(self, value):
        self.value = to_field(value)

    def evaluate(self, resolver):
        return self.value

    def degree(self):
        return 0

    def __repr__(self):
        return f"Constant({int(self.value)})"


class SelectorExpr(Expression):
    def __init__(self, selector):
        self.selector = selector

    def evaluate(self, resolver):
        return resolver.selector(self.selector)

    def degree(self):
        return 1

    def __repr__(self):
        return repr(self.selector)


class Query(Expression):
    """열 값 질의: column 의 (현재 행 + rotation) 셀."""

    def __init__(self, column, rotation):
        self.column = column
        self.rotation = rotation

    def evaluate(self, resolver):
        return resolver.query(self.column, self.rotation)

    def degree(self):
        return 1

    def queries(self):
        return [(self.column, self.rotation)]

    def __repr__(self):
        return f"{self.column}@{self.rotation:+d}"


class Negated(Expression):
    def __init__(self, inner):
        self.inner = inner

    def evaluate(self, resolver):
        return -self.inner.evaluate(resolver)

    def degree(self):
        return self.inner.degree()

    def queries(self):
        return self.inner.queries()

    def __repr__(self):
        return f"-{self.inner!r}"


class Sum(Expression):
    def __init__(self, left, right):
        self.left = left
        self.right = right

    def evaluate(self, resolver):
        return self.left.evaluate(resolver) + self.right.evaluate(resolver)

    def degree(self):
        return max(self.left.degree(), self.right.degree())

    def queries(self):
        return self.left.queries() + self.right.queries()

    def __repr__(self):
        return f"({self.left!r} + {self.right!r})"


class Product(Expression):
    def __init__(self, left, right):
        self.left = left
        self.right = right

    def evaluate(self, resolver):
        return self.left.evaluate(resolver) * self.right.evaluate(resolver)

    def degree(self):
        return self.left.degree() + self.right.degree()

    def queries(self):
        return self.left.queries() + self.right.queries()

    def __repr__(self):
        return f"{self.left!r} * {self.right!r}"


class Scaled(Expression):
    def __init__(self, inner, factor):
        self.inner = inner
        self.factor = factor

    def evaluate(self, resolver):
        return self.inner.evaluate(resolver) * self.factor

    def degree(self):
        return self.inner.degree()

    def queries(self):
        return self.inner.queries()

    def __repr__(self):
        return f"{self.inner!r} * {int(self.factor)}"
