# module medicare.app
from medicare.app_setup.factory import create_app

# App globale
app = create_app()
