from enum import StrEnum


class QueryOperator(StrEnum):
    """
    Operator symbols understood by the remote object store.

    This enum is the single source of truth for the keys that can appear inside
    a `where` operator sub-mapping. Members compare equal to their string value,
    so the encoded wire parameters contain plain strings.

    Important: Internal Use Only
        End-users should never need to use these identifiers directly, as they
        are produced by the `where_*` methods of
        [`Query`][objectquery.models.query.builders.Query].
    """

    # --- Comparison ---
    NOT_EQUAL = "$ne"
    GREATER_THAN = "$gt"
    GREATER_THAN_OR_EQUAL = "$gte"
    LESS_THAN = "$lt"
    LESS_THAN_OR_EQUAL = "$lte"

    # --- Membership ---
    IN = "$in"
    NOT_IN = "$nin"
    ALL = "$all"
    EXISTS = "$exists"

    # --- Patterns ---
    REGEX = "$regex"
    REGEX_OPTIONS = "$options"

    # --- Subqueries ---
    IN_QUERY = "$inQuery"
    NOT_IN_QUERY = "$notInQuery"
    SELECT = "$select"
    DONT_SELECT = "$dontSelect"

    # --- Geospatial ---
    NEAR_SPHERE = "$nearSphere"
    MAX_DISTANCE = "$maxDistance"
    WITHIN = "$within"
    BOX = "$box"

    # --- Top level ---
    OR = "$or"
    RELATED_TO = "$relatedTo"
