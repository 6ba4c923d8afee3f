from .query_operator import QueryOperator as QueryOperator
