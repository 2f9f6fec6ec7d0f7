"""
QueryHelpers module for normalising caller-supplied query values into their wire form
"""

from typing import Dict, Any, List, Mapping, Sequence, Union

# Tagged variants accepted by the normalisers
Scalar = Union[str, int, float, bool]
StringList = Union[str, Sequence[str]]
FilterExpr = Mapping[str, Any]
QueryValue = Union[Scalar, StringList, FilterExpr]


class QueryHelpers:
    """Stateless normalisers, one per recognised query key"""

    # Filter values without an explicit operator are treated as equality
    DEFAULT_FILTER_OPERATOR = 'eq'

    # Sentinel accepted by the API for "no limit"
    NO_LIMIT = -1

    @staticmethod
    def _join(value: StringList) -> str:
        """Comma-join a sequence of strings; strings pass through"""
        if isinstance(value, str):
            return value
        return ','.join(str(item) for item in value)

    @staticmethod
    def _integer(key: str, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError(f"Query '{key}' expects an integer, got boolean {value!r}")
        try:
            number = int(value)
        except (TypeError, ValueError):
            raise ValueError(f"Query '{key}' expects an integer, got {value!r}")
        if isinstance(value, float) and value != number:
            raise ValueError(f"Query '{key}' expects an integer, got {value!r}")
        return number

    @staticmethod
    def single(value: bool = True) -> bool:
        """
        Return the result as a single object instead of a list

        The API forces limit=1 when this is set; the caller does not need to.
        """
        return bool(value)

    @staticmethod
    def limit(value: int) -> int:
        return QueryHelpers._integer('limit', value)

    @staticmethod
    def offset(value: int) -> int:
        return QueryHelpers._integer('offset', value)

    @staticmethod
    def page(value: int) -> int:
        return QueryHelpers._integer('page', value)

    @staticmethod
    def meta(value: StringList = '*') -> str:
        return QueryHelpers._join(value)

    @staticmethod
    def status(value: StringList = '*') -> str:
        return QueryHelpers._join(value)

    @staticmethod
    def sort(value: StringList) -> str:
        """Sort fields in priority order; prefix a field with '-' for descending"""
        return QueryHelpers._join(value)

    @staticmethod
    def q(value: str) -> str:
        return value

    @staticmethod
    def fields(value: StringList) -> str:
        return QueryHelpers._join(value)

    @staticmethod
    def filter(value: FilterExpr) -> Dict[str, Dict[str, Any]]:
        """
        Normalise a filter expression to {field: {operator: value}}

        Args:
            value: Mapping of field name to either a bare value (equality)
                   or a mapping of operator to operand

        Returns:
            New nested dictionary, operands untouched apart from tuples becoming lists

        Raises:
            TypeError: If the filter is not a mapping
        """
        if not isinstance(value, Mapping):
            raise TypeError(f"Query 'filter' expects a mapping, got {type(value).__name__}")

        normalised: Dict[str, Dict[str, Any]] = {}
        for field_name, condition in value.items():
            if isinstance(condition, Mapping):
                operators = dict(condition)
            else:
                operators = {QueryHelpers.DEFAULT_FILTER_OPERATOR: condition}

            for operator, operand in operators.items():
                if isinstance(operand, tuple):
                    operators[operator] = list(operand)

            normalised[str(field_name)] = operators

        return normalised

    # Query key -> normaliser
    NORMALIZERS = {
        'single': single,
        'limit': limit,
        'offset': offset,
        'page': page,
        'meta': meta,
        'status': status,
        'sort': sort,
        'q': q,
        'filter': filter,
        'fields': fields,
    }

    @classmethod
    def normalize(cls, key: str, value: Any) -> Any:
        """
        Normalise a value for the given query key

        Unrecognised keys are returned unchanged.
        """
        normaliser = cls.NORMALIZERS.get(key)
        if normaliser is None:
            return value
        return normaliser(value)

    @classmethod
    def recognised_keys(cls) -> List[str]:
        return sorted(cls.NORMALIZERS)
