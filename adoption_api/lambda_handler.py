"""AWS Lambda handler for the Adoption API.

This module provides the Lambda function handler that wraps the FastAPI
application using the Mangum adapter, so the same ASGI app runs behind
API Gateway.

Pipeline state must be shared between Lambda instances: deploy with
STORAGE_BACKEND=dynamodb, otherwise each instance keeps its own keys,
counters and idempotency records.
"""

from mangum import Mangum

from adoption_api.main import app

# Lifespan stays on so the bootstrap API key is seeded on cold start
handler = Mangum(app, lifespan="auto")


def lambda_handler(event: dict, context: object) -> dict:
    """
    AWS Lambda function handler.

    Args:
        event: API Gateway event containing request details
        context: Lambda context object with runtime information

    Returns:
        API Gateway response dict with statusCode, headers, and body
    """
    return handler(event, context)
