from .deployment_db import DeploymentDatabase
