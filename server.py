import logging

from fastmcp import FastMCP

from ado_compare import __version__, resources
from ado_compare.comparison.tools import register_comparison_tools
from ado_compare.config import AdoCompareConfig
from ado_compare.snapshots import SnapshotCache, SnapshotStore
from ado_compare.telemetry import initialize_telemetry

# Configure basic logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

config = AdoCompareConfig.from_env()
initialize_telemetry(config.telemetry)

mcp: FastMCP = FastMCP(name="ado-process-compare", version=__version__)


def create_snapshot_store(snapshot_dir: str) -> SnapshotStore:
    """Create a snapshot store using the configured cache settings."""
    cache = SnapshotCache(ttl_seconds=config.cache.ttl_seconds, max_size=config.cache.max_size)
    return SnapshotStore(snapshot_dir, cache=cache)


# Global container for the snapshot store
store_container = {
    "store": create_snapshot_store(config.snapshot_dir),
}


@mcp.tool
def set_snapshot_directory(snapshot_dir: str) -> dict:
    """
    Switches the directory pulled process snapshots are read from and saved to.
    The snapshot cache is reset along with the store.
    """
    logger.info(f"Switching snapshot directory to: {snapshot_dir}")
    store_container["store"] = create_snapshot_store(snapshot_dir)
    return {"result": True, "snapshotDir": snapshot_dir}


register_comparison_tools(mcp, store_container)
resources.register_mcp_resources(mcp)


def main():
    """Main entry point for the ado-process-compare server."""
    mcp.run()


if __name__ == "__main__":  # pragma: no cover
    main()
