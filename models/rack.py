from dataclasses import dataclass


@dataclass
class Rack:
    rack_id: str
    code: str
    warehouse_name: str
    zone_name: str
    shelf_name: str
    capacity: int
    current_count: int = 0
    status: str = "available"
    is_active: bool = True

    @property
    def path(self) -> str:
        return f"{self.warehouse_name} > {self.zone_name} > {self.shelf_name} > {self.code}"

    @property
    def free_slots(self) -> int:
        return max(0, self.capacity - self.current_count)

    @property
    def utilization_pct(self) -> float:
        """Occupancy as a percentage of capacity (0 for a zero-capacity rack)."""
        if self.capacity <= 0:
            return 0.0
        return self.current_count / self.capacity * 100
