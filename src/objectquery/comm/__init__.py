from .cancellation import CancellationToken as CancellationToken
from .config import QueryClientConfig as QueryClientConfig
from .query_client import QueryClient as QueryClient
