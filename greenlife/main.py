from fastapi import FastAPI

from greenlife.core.logging import configure_logging
from greenlife.database import create_db_and_tables
from greenlife.routers import admin
from greenlife.routers import appointments
from greenlife.routers import auth
from greenlife.routers import dashboard
from greenlife.routers import inquiries
from greenlife.routers import notifications
from greenlife.routers import services
from greenlife.routers import therapists
from greenlife.routers import users

configure_logging()

app = FastAPI(title="GreenLife Wellness Center")
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(services.router)
app.include_router(therapists.router)
app.include_router(appointments.router)
app.include_router(inquiries.router)
app.include_router(notifications.router)
app.include_router(dashboard.router)
app.include_router(admin.router)


@app.on_event("startup")
def on_startup():
    create_db_and_tables()


@app.get("/")
def root():
    return {"message": "GreenLife Wellness Center API"}
