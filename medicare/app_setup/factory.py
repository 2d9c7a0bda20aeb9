from typing import Optional
from fastapi import FastAPI

from medicare.app_setup.exceptions import register_exception_handlers
from medicare.app_setup.lifespan import lifespan as app_lifespan
from medicare.app_setup.middlewares import register_basic_middlewares
from medicare.app_setup.routers import register_routers
from medicare.medicines.sources import MedicineDataSource, select_medicine_source


def create_app(medicine_source: Optional[MedicineDataSource] = None) -> FastAPI:
    """
    Crée et configure l'instance FastAPI.
    Étapes:
      1) choix de la source du catalogue (une seule fois, jamais par requête)
      2) register_basic_middlewares: CORS, TrustedHost, ProxyHeaders
      3) register_exception_handlers: enveloppe FAIL pour toutes les erreurs
      4) register_routers: API v1, admin, health
    """
    app = FastAPI(title="MediCare Storefront API", lifespan=app_lifespan)
    app.state.medicine_source = medicine_source or select_medicine_source()
    register_basic_middlewares(app)
    register_exception_handlers(app)
    register_routers(app)
    return app
