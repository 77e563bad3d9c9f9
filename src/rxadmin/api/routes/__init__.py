"""Route group exports."""

from . import (
    auth,
    cities,
    dashboard,
    distributors,
    district_products,
    districts,
    doctors,
    health,
    orders,
    patients,
    prescriptions,
    products,
    reports,
    teams,
    users,
)

__all__ = [
    "health",
    "auth",
    "users",
    "districts",
    "cities",
    "distributors",
    "teams",
    "doctors",
    "patients",
    "prescriptions",
    "orders",
    "products",
    "district_products",
    "dashboard",
    "reports",
]
