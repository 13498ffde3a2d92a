"""Service modules"""
from .dashboard import DashboardService, build_portfolio_view, build_visitor_view

__all__ = ["DashboardService", "build_portfolio_view", "build_visitor_view"]
