"""Python clients for the VRUX HTTP API and the operations feed."""

from .vrux import VruxClient, ClientError, LikeToggle
from .operations import DashboardState, OperationsFeed

__all__ = ["VruxClient", "ClientError", "LikeToggle", "DashboardState", "OperationsFeed"]
