"""
FastAPI backend: identity reconciliation REST API.
Run with uvicorn: uvicorn api.main:app --reload
"""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv

# Load .env from repo root (when run from repo root or from Docker)
for path in (
    Path(__file__).resolve().parent.parent.parent / ".env",
    Path.cwd() / ".env",
):
    if path.exists():
        load_dotenv(path)
        break

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from neo4j import GraphDatabase
from neo4j.exceptions import DriverError, Neo4jError, ServiceUnavailable, SessionExpired
from pydantic import BaseModel

from contactlink.application import (
    ClusterGroup,
    IdentifyQuery,
    IdentityResolver,
    InvalidInput,
    NoCanonicalPrimary,
)
from contactlink.domain import Contact
from contactlink.infrastructure import (
    InMemoryContactStore,
    Neo4jContactStore,
    canonical_phone,
    ensure_contact_constraints,
)

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)

STORE_NEO4J = "neo4j"
STORE_MEMORY = "memory"
DEFAULT_CORS_ORIGINS = "http://localhost:3000,https://localhost:3000"


def _store_backend() -> str:
    return os.environ.get("CONTACT_STORE", STORE_NEO4J).strip().lower() or STORE_NEO4J


def _phone_default_region() -> str | None:
    return os.environ.get("PHONE_DEFAULT_REGION", "").strip().upper() or None


def _cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    return [o.strip() for o in raw.split(",") if o.strip()]


def _get_driver():
    uri = os.environ.get("NEO4J_URI", "bolt://localhost:7687").strip()
    user = os.environ.get("NEO4J_USER", "neo4j").strip()
    password = os.environ.get("NEO4J_PASSWORD", "password").strip()
    return GraphDatabase.driver(uri, auth=(user, password))


def get_resolver(app: FastAPI) -> IdentityResolver:
    if getattr(app.state, "resolver", None) is None:
        if _store_backend() == STORE_MEMORY:
            app.state.resolver = IdentityResolver(InMemoryContactStore())
        else:
            app.state.resolver = IdentityResolver(
                Neo4jContactStore(_get_cached_driver(app))
            )
    return app.state.resolver


def _get_cached_driver(app: FastAPI):
    if getattr(app.state, "driver", None) is None:
        app.state.driver = _get_driver()
    return app.state.driver


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.driver = None
    app.state.resolver = None
    backend = _store_backend()
    logger.info("Contact store backend: %s", backend)
    try:
        if backend == STORE_NEO4J:
            app.state.driver = _get_driver()
            ensure_contact_constraints(app.state.driver)
        get_resolver(app)
        yield
    finally:
        if getattr(app.state, "driver", None) is not None:
            app.state.driver.close()
            logger.info("Neo4j driver closed")


app = FastAPI(title="Contactlink Identity API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)


# --- REST: root and health ---


@app.get("/")
def root():
    return {
        "message": "Contactlink identity service is running.",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/health/store")
def store_health(request: Request):
    backend = _store_backend()
    if backend == STORE_MEMORY:
        return {"status": "ok", "store": STORE_MEMORY}
    try:
        _get_cached_driver(request.app).verify_connectivity()
    except (DriverError, Neo4jError, OSError) as e:
        logger.warning("Store health check failed: %s", e)
        return JSONResponse(
            content={"status": "error", "store": backend, "error": str(e)},
            status_code=503,
        )
    return {"status": "ok", "store": backend}


# --- REST: identify ---


class IdentifyBody(BaseModel):
    email: str | None = None
    phoneNumber: int | str | None = None


class ContactItem(BaseModel):
    id: int
    email: str | None = None
    phoneNumber: str | None = None
    linkedId: int | None = None
    linkPrecedence: str
    createdAt: str
    updatedAt: str


class ClusterItem(BaseModel):
    primaryContact: ContactItem
    secondaryContacts: list[ContactItem]
    totalContacts: int


def _contact_item(c: Contact) -> ContactItem:
    return ContactItem(
        id=c.id,
        email=c.email,
        phoneNumber=c.phone_number,
        linkedId=c.linked_id,
        linkPrecedence=c.link_precedence.value,
        createdAt=c.created_at.isoformat(),
        updatedAt=c.updated_at.isoformat(),
    )


def _cluster_item(group: ClusterGroup) -> ClusterItem:
    return ClusterItem(
        primaryContact=_contact_item(group.primary),
        secondaryContacts=[_contact_item(s) for s in group.secondaries],
        totalContacts=group.total_contacts,
    )


def _query_from_body(body: IdentifyBody) -> IdentifyQuery:
    """Validate the raw body and build the resolver input. Raises HTTPException(400)."""
    email = body.email
    phone = str(body.phoneNumber) if body.phoneNumber is not None else None
    if not email and not phone:
        raise HTTPException(
            status_code=400,
            detail={
                "error": "At least one of email or phoneNumber must be provided",
                "message": "Please provide either an email address or phone number in the request body",
                "example": {"email": "user@example.com", "phoneNumber": "+1234567890"},
                "received": {"email": email or None, "phoneNumber": phone or None},
            },
        )
    if email and not email.strip():
        raise HTTPException(
            status_code=400,
            detail={
                "error": "Invalid email format",
                "message": "Email cannot be empty or just whitespace",
            },
        )
    if phone and not phone.strip():
        raise HTTPException(
            status_code=400,
            detail={
                "error": "Invalid phone number format",
                "message": "Phone number cannot be empty or just whitespace",
            },
        )
    return IdentifyQuery(
        email=email.strip() if email else None,
        phone_number=canonical_phone(phone, _phone_default_region()),
    )


def _server_error(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse(
        content={"error": "Internal server error", "message": message},
        status_code=status_code,
    )


@app.post("/identify")
def identify(body: IdentifyBody, request: Request):
    query = _query_from_body(body)
    logger.info(
        "Processing identify request email=%s phone_number=%s",
        query.email,
        query.phone_number,
    )
    resolver = get_resolver(request.app)
    try:
        view = resolver.resolve(query)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except NoCanonicalPrimary as e:
        logger.exception("Integrity fault for contacts %s", e.contact_ids)
        return _server_error(str(e))
    except (ServiceUnavailable, SessionExpired) as e:
        logger.exception("Contact store unavailable")
        return _server_error(str(e) or "Contact store unavailable", status_code=503)
    except Exception as e:
        logger.exception("Error in /identify")
        return _server_error(str(e) or "Unknown error")
    return view.to_payload()


@app.get("/identify")
def list_identities(request: Request):
    resolver = get_resolver(request.app)
    try:
        listing = resolver.list_clusters()
    except (ServiceUnavailable, SessionExpired) as e:
        logger.exception("Contact store unavailable")
        return _server_error(str(e) or "Contact store unavailable", status_code=503)
    except Exception as e:
        logger.exception("Error fetching contacts")
        return _server_error(str(e) or "Unknown error")
    return {
        "totalPrimary": listing.total_primary,
        "totalSecondary": listing.total_secondary,
        "totalContacts": listing.total_contacts,
        "clusters": [_cluster_item(g) for g in listing.groups],
        "unlinkedContacts": [_contact_item(c) for c in listing.unlinked],
    }
