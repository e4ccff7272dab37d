from tortoise import BaseDBAsyncClient


async def upgrade(db: BaseDBAsyncClient) -> str:
    return """
        CREATE TABLE IF NOT EXISTS "users" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "name" VARCHAR(255) NOT NULL,
    "email" VARCHAR(255) NOT NULL UNIQUE,
    "password" VARCHAR(255) NOT NULL,
    "role" VARCHAR(10) NOT NULL DEFAULT 'patient',
    "avatar" VARCHAR(500),
    "is_verified" BOOL NOT NULL DEFAULT False,
    "otp" VARCHAR(6),
    "otp_expiry" TIMESTAMPTZ,
    "reset_token" VARCHAR(64),
    "reset_token_expiry" TIMESTAMPTZ,
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);
COMMENT ON COLUMN "users"."role" IS 'PATIENT: patient\nDOCTOR: doctor\nADMIN: admin';
CREATE TABLE IF NOT EXISTS "doctors" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "name" VARCHAR(255) NOT NULL,
    "specialization" VARCHAR(50) NOT NULL,
    "experience" INT NOT NULL DEFAULT 0,
    "consultation_fee" INT NOT NULL DEFAULT 500,
    "qualifications" JSONB NOT NULL,
    "bio" TEXT NOT NULL,
    "photo" VARCHAR(500),
    "rating" DOUBLE PRECISION NOT NULL DEFAULT 4.5,
    "review_count" INT NOT NULL DEFAULT 0,
    "available_slots" JSONB NOT NULL,
    "is_available" BOOL NOT NULL DEFAULT True,
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "user_id" INT NOT NULL UNIQUE REFERENCES "users" ("id") ON DELETE CASCADE
);
COMMENT ON COLUMN "doctors"."specialization" IS 'CARDIOLOGY: Cardiology\nORTHOPEDIC: Orthopedic\nDERMATOLOGY: Dermatology\nPEDIATRICS: Pediatrics\nPSYCHIATRY: Psychiatry\nNEUROLOGY: Neurology\nGASTROENTEROLOGY: Gastroenterology\nOPHTHALMOLOGY: Ophthalmology\nGENERAL_PRACTITIONER: General Practitioner\nDENTAL: Dental';
CREATE TABLE IF NOT EXISTS "profiles" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "date_of_birth" DATE,
    "gender" VARCHAR(10) NOT NULL DEFAULT '',
    "phone" VARCHAR(30) NOT NULL DEFAULT '',
    "address" TEXT NOT NULL,
    "medical_history" JSONB NOT NULL,
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "user_id" INT NOT NULL UNIQUE REFERENCES "users" ("id") ON DELETE CASCADE
);
COMMENT ON COLUMN "profiles"."gender" IS 'MALE: male\nFEMALE: female\nOTHER: other\nUNSET: ';
CREATE TABLE IF NOT EXISTS "appointments" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "date" DATE NOT NULL,
    "time" VARCHAR(20) NOT NULL,
    "status" VARCHAR(20) NOT NULL DEFAULT 'booked',
    "consultation_fee" INT NOT NULL,
    "is_paid" BOOL NOT NULL DEFAULT False,
    "notes" TEXT NOT NULL,
    "reason" TEXT NOT NULL,
    "cancellation_reason" TEXT NOT NULL,
    "slot_key" VARCHAR(100) UNIQUE,
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "doctor_id" INT REFERENCES "doctors" ("id") ON DELETE SET NULL,
    "patient_id" INT NOT NULL REFERENCES "users" ("id") ON DELETE RESTRICT
);
COMMENT ON COLUMN "appointments"."status" IS 'BOOKED: booked\nCONFIRMED: confirmed\nCOMPLETED: completed\nCANCELLED: cancelled';
CREATE TABLE IF NOT EXISTS "prescriptions" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "medicines" JSONB NOT NULL,
    "diagnosis" TEXT NOT NULL,
    "instructions" TEXT NOT NULL,
    "date" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "appointment_id" INT NOT NULL UNIQUE REFERENCES "appointments" ("id") ON DELETE RESTRICT,
    "doctor_id" INT REFERENCES "doctors" ("id") ON DELETE SET NULL,
    "patient_id" INT NOT NULL REFERENCES "users" ("id") ON DELETE RESTRICT
);
CREATE TABLE IF NOT EXISTS "aerich" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "version" VARCHAR(255) NOT NULL,
    "app" VARCHAR(100) NOT NULL,
    "content" JSONB NOT NULL
);"""


async def downgrade(db: BaseDBAsyncClient) -> str:
    return """
        """
