"""
Registre central des routers.
- API v1: payments, cart, orders, medicines, profile, contact
- Admin: admin_router
- Health: health_router
"""
from fastapi import FastAPI
from medicare.payments import views as payments_views
from medicare.cart import views as cart_views
from medicare.orders import views as orders_views
from medicare.medicines import views as medicines_views
from medicare.profiles import views as profiles_views
from medicare.contact import views as contact_views
from medicare.admin.views import router as admin_router
from medicare.health.router import router as health_router


def register_routers(app: FastAPI) -> None:
    # API v1
    app.include_router(payments_views.router)
    app.include_router(cart_views.router)
    app.include_router(orders_views.router)
    app.include_router(medicines_views.router)
    app.include_router(profiles_views.router)
    app.include_router(contact_views.router)
    # Admin
    app.include_router(admin_router)
    # Health & monitoring
    app.include_router(health_router)
