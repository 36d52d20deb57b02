import logging

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from core.catch_error_middleware import ErrorHandlerMiddleware
from core.errors import DomainError
from core.exception_handler import DomainErrorHandler, ValidationErrorHandler
from core.lifespan import lifespan
from core.settings import settings
from routes.account_routes import router as account_router
from routes.application_routes import router as application_router
from routes.bill_routes import router as bill_router
from routes.booking_routes import router as booking_router
from routes.notification_routes import router as notification_router
from routes.property_routes import router as property_router
from routes.verification_routes import router as verification_router

logging.basicConfig(level=logging.INFO)

app = FastAPI(
    lifespan=lifespan,
    title=settings.PROJECT_NAME,
    version="1.0.0",
)

app.include_router(account_router, prefix="/v1/accounts")
app.include_router(verification_router, prefix="/v1/verification")
app.include_router(property_router, prefix="/v1/properties")
app.include_router(application_router, prefix="/v1/applications")
app.include_router(booking_router, prefix="/v1/bookings")
app.include_router(bill_router, prefix="/v1/bills")
app.include_router(notification_router, prefix="/v1/notifications")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["System"])
async def health_check():
    return {"status": "ok"}


app.add_exception_handler(RequestValidationError, ValidationErrorHandler())
app.add_exception_handler(DomainError, DomainErrorHandler())

app.add_middleware(ErrorHandlerMiddleware)


if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8001)
