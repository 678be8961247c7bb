from typing import List, Optional, Sequence

from searchcluster.cluster.host import SearchHost


class SearchService:
    """A named, ordered group of search hosts (one logical search cluster)."""

    def __init__(
        self,
        name: str,
        hosts: Optional[Sequence[SearchHost]] = None,
        service_type: str = "elasticsearch",
    ):
        self.name = name
        self.service_type = service_type
        self.hosts: List[SearchHost] = list(hosts or [])

    def add_host(self, host: SearchHost) -> "SearchService":
        self.hosts.append(host)
        return self

    def get_all_hosts_for_role(self, role: str) -> List[SearchHost]:
        """Enabled hosts serving `role`, in configured order."""
        return [h for h in self.hosts if h.has_role(role) and not h.disabled]

    def __repr__(self) -> str:
        return f"<SearchService {self.name} hosts={len(self.hosts)}>"
