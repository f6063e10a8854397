"""AWS Lambda handler for the Dynamic Route 53 DNS service.

Wraps the FastAPI application with the Mangum adapter so it runs on AWS
Lambda behind API Gateway. Mangum passes API Gateway's sourceIp through
as the ASGI client address.
"""

from mangum import Mangum

from route53_ddns.main import app

# Stage names are not part of the routed paths
handler = Mangum(app, lifespan="off", api_gateway_base_path="/v1")


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
