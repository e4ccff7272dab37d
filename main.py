from dotenv import load_dotenv
load_dotenv()
import logging
import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from helpers.tortoise_config import lifespan
from helpers.errors import register_error_handlers
from controllers.auth_controller import auth_router
from controllers.password_controller import password_router
from controllers.doctor_controller import doctor_router
from controllers.appointment_controller import appointment_router
from controllers.profile_controller import profile_router
from controllers.admin_controller import admin_router


logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


app = FastAPI(title="CareNest API", lifespan=lifespan)


app.add_middleware(
    CORSMiddleware,
    allow_origins=[os.getenv("FRONTEND_URL", "http://localhost:5173")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


app.include_router(auth_router, prefix='/api', tags=['Authentication'])
app.include_router(password_router, prefix='/api', tags=['Password'])
app.include_router(doctor_router, prefix='/api', tags=['Doctors'])
app.include_router(appointment_router, prefix='/api', tags=['Appointments'])
app.include_router(profile_router, prefix='/api', tags=['Profile'])
app.include_router(admin_router, prefix='/api', tags=['Admin'])


@app.get('/api/health')
def health():
    return {
        "message": "CareNest Backend is running"
    }
