from mangum import Mangum
from main import app

# API Gateway entry point; no startup/shutdown events are used
handler = Mangum(app, lifespan="off")

def lambda_handler(event, context):
    return handler(event, context)
