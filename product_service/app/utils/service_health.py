"""
Product Service Health Check Utilities
======================================

Runs named async probes and folds them into one report. The database is
required; Kafka is reported but only degrades the service, since change
events are logged instead of published while the broker is away.
"""

import time
from typing import Any, Awaitable, Callable, Dict

HealthProbe = Callable[[], Awaitable[Dict[str, Any]]]


class ProductServiceHealthChecker:
    """Product Service specific health checker"""

    def __init__(self, service_name: str = "product-service") -> None:
        self.service_name = service_name
        self.checks: Dict[str, HealthProbe] = {}
        self.critical: set[str] = set()
        self.start_time = time.time()

    def add_check(self, name: str, probe: HealthProbe, critical: bool = True) -> None:
        self.checks[name] = probe
        if critical:
            self.critical.add(name)

    async def run_checks(self) -> Dict[str, Any]:
        results: Dict[str, Dict[str, Any]] = {}
        check_start_time = time.time()

        for name, probe in self.checks.items():
            individual_start = time.time()
            try:
                result = await probe()
            except Exception as e:
                result = {"status": "error", "error": str(e)}
            result["duration_ms"] = round((time.time() - individual_start) * 1000, 2)
            results[name] = result

        if any(
            results[name].get("status") != "healthy" for name in self.critical
        ):
            status = "unhealthy"
        elif any(r.get("status") != "healthy" for r in results.values()):
            status = "degraded"
        else:
            status = "healthy"

        return {
            "service": self.service_name,
            "status": status,
            "checks": results,
            "total_duration_ms": round((time.time() - check_start_time) * 1000, 2),
            "uptime_seconds": round(time.time() - self.start_time, 2),
            "timestamp": time.time(),
        }
