import logging
import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from .db import get_db, init_db
from .auth import SESSION_COOKIE, get_current_user, get_optional_user
from .plotly_graph.plotly_render import build_network_figure, figure_to_json
from . import account, auth, crud, features, graph, groups, i18n, schemas, unsubscribe

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="Rolodex", lifespan=lifespan)


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def _set_session(response: Response, user_id: str):
    response.set_cookie(SESSION_COOKIE, auth.create_session_token(user_id),
                        httponly=True, samesite="lax")


@app.get("/health")
def health():
    return {"ok": True}


# ── Auth ──

@app.get("/api/auth/available-providers", response_model=schemas.ProvidersOut)
def available_providers():
    return {"providers": features.available_providers()}


@app.post("/api/auth/register", response_model=schemas.UserOut)
def register(body: schemas.RegisterIn, response: Response, db: Session = Depends(get_db)):
    try:
        user = auth.create_user(db, body.email, body.name, body.password,
                                surname=body.surname, language=i18n.normalize_locale(body.language))
    except ValueError as e:
        raise HTTPException(400, str(e))
    _set_session(response, user["id"])
    return user


@app.post("/api/auth/login", response_model=schemas.UserOut)
def login(body: schemas.LoginIn, response: Response, db: Session = Depends(get_db)):
    user = auth.authenticate_user(db, body.email, body.password)
    if not user:
        raise HTTPException(401, "Invalid email or password")
    _set_session(response, user["id"])
    return user


@app.post("/api/auth/logout")
def logout(response: Response):
    response.delete_cookie(SESSION_COOKIE)
    return {"ok": True}


@app.get("/api/auth/me", response_model=schemas.UserOut)
def me(user: dict = Depends(get_current_user)):
    return user


# ── People ──

@app.get("/api/people", response_model=list[schemas.PersonOut])
def people(user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    return crud.list_people(db, user["id"])


@app.post("/api/people", response_model=schemas.PersonOut)
def add_person(body: schemas.PersonCreate, user: dict = Depends(get_current_user),
               db: Session = Depends(get_db)):
    try:
        return crud.create_person(db, user["id"], **body.model_dump())
    except ValueError as e:
        raise HTTPException(400, str(e))


@app.delete("/api/people/{person_id}")
def remove_person(person_id: str, user: dict = Depends(get_current_user),
                  db: Session = Depends(get_db)):
    if not crud.delete_person(db, user["id"], person_id):
        raise HTTPException(404, "Person not found")
    return {"ok": True}


def _person_graph(db: Session, user: dict, person_id: str) -> dict:
    network = graph.load_person_network(db, person_id, user["id"])
    if network is None:
        raise HTTPException(404, "Person not found")
    return graph.assemble_graph(network, graph.user_node_id(user["id"]))


@app.get("/api/people/{person_id}/graph", response_model=schemas.GraphOut)
def person_graph(person_id: str, user: dict = Depends(get_current_user),
                 db: Session = Depends(get_db)):
    return _person_graph(db, user, person_id)


@app.get("/api/people/{person_id}/graph/figure")
def person_graph_figure(person_id: str, user: dict = Depends(get_current_user),
                        db: Session = Depends(get_db)):
    fig = build_network_figure(_person_graph(db, user, person_id))
    return JSONResponse(content=figure_to_json(fig))


# ── Groups ──

@app.get("/api/groups", response_model=list[schemas.GroupOut])
def list_groups(user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    return groups.list_groups(db, user["id"])


@app.post("/api/groups", response_model=schemas.GroupOut)
def add_group(body: schemas.GroupCreate, user: dict = Depends(get_current_user),
              db: Session = Depends(get_db)):
    return groups.create_group(db, user["id"], body.name, body.color)


@app.delete("/api/groups/{group_id}")
def remove_group(group_id: str, user: dict = Depends(get_current_user),
                 db: Session = Depends(get_db)):
    if not groups.delete_group(db, user["id"], group_id):
        raise HTTPException(404, "Group not found")
    return {"ok": True}


@app.get("/api/groups/{group_id}/members", response_model=list[schemas.PersonOut])
def list_group_members(group_id: str, user: dict = Depends(get_current_user),
                       db: Session = Depends(get_db)):
    if not groups.get_group(db, user["id"], group_id):
        raise HTTPException(404, "Group not found")
    return groups.list_members(db, user["id"], group_id)


@app.post("/api/groups/{group_id}/members")
def add_group_member(group_id: str, body: schemas.MemberIn,
                     user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        groups.add_member(db, user["id"], group_id, body.person_id)
    except ValueError as e:
        raise HTTPException(404, str(e))
    return {"ok": True}


@app.delete("/api/groups/{group_id}/members/{person_id}")
def remove_group_member(group_id: str, person_id: str,
                        user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    if not groups.remove_member(db, user["id"], group_id, person_id):
        raise HTTPException(404, "Membership not found")
    return {"ok": True}


# ── Relationship types & relationships ──

@app.get("/api/relationship-types", response_model=list[schemas.RelationshipTypeOut])
def relationship_types(user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    return crud.list_relationship_types(db, user["id"])


@app.post("/api/relationship-types", response_model=schemas.RelationshipTypeOut)
def add_relationship_type(body: schemas.RelationshipTypeCreate,
                          user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        return crud.create_relationship_type(db, user["id"], **body.model_dump())
    except ValueError as e:
        raise HTTPException(400, str(e))


@app.delete("/api/relationship-types/{type_id}")
def remove_relationship_type(type_id: str, user: dict = Depends(get_current_user),
                             db: Session = Depends(get_db)):
    if not crud.delete_relationship_type(db, user["id"], type_id):
        raise HTTPException(404, "Relationship type not found")
    return {"ok": True}


@app.post("/api/relationships", response_model=schemas.RelOut)
def add_rel(body: schemas.RelCreate, user: dict = Depends(get_current_user),
            db: Session = Depends(get_db)):
    try:
        return crud.create_relationship(db, user["id"], body.person_id, body.related_person_id,
                                        body.relationship_type_id, body.notes)
    except ValueError as e:
        raise HTTPException(400, str(e))


@app.delete("/api/relationships/{relationship_id}")
def remove_rel(relationship_id: str, user: dict = Depends(get_current_user),
               db: Session = Depends(get_db)):
    if not crud.delete_relationship(db, user["id"], relationship_id):
        raise HTTPException(404, "Relationship not found")
    return {"ok": True}


@app.post("/api/important-dates", response_model=schemas.ImportantDateOut)
def add_important_date(body: schemas.ImportantDateCreate,
                       user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        return crud.create_important_date(db, user["id"], body.person_id, body.title,
                                          body.date, body.reminder_enabled)
    except ValueError as e:
        raise HTTPException(404, str(e))


# ── Unsubscribe ──

@app.get("/api/unsubscribe", response_model=schemas.UnsubscribeDetailsOut)
def unsubscribe_details(token: str = Query(...), db: Session = Depends(get_db)):
    details = unsubscribe.get_unsubscribe_details(db, token)
    if details is None:
        raise HTTPException(404, "Invalid token")
    return details


@app.post("/api/unsubscribe", response_model=schemas.UnsubscribeOut)
def unsubscribe_reminder(body: schemas.UnsubscribeIn, db: Session = Depends(get_db)):
    if not body.token:
        return JSONResponse(status_code=400, content={"error": "MISSING_TOKEN"})
    try:
        result = unsubscribe.consume_unsubscribe_token(db, body.token)
    except unsubscribe.UnsubscribeError as e:
        return JSONResponse(status_code=400, content={"error": e.code})
    return {"success": True, "reminder_type": result["reminder_type"]}


# ── Settings ──

@app.get("/api/settings/profile", response_model=schemas.UserOut)
def get_profile(user: dict = Depends(get_current_user)):
    return user


@app.put("/api/settings/profile", response_model=schemas.UserOut)
def update_profile(body: schemas.ProfileUpdate, user: dict = Depends(get_current_user),
                   db: Session = Depends(get_db)):
    try:
        updated = account.update_profile(db, user["id"], **body.model_dump())
    except ValueError as e:
        raise HTTPException(400, str(e))
    return auth.public_user(updated)


@app.put("/api/settings/security/password")
def change_password(body: schemas.PasswordChange, user: dict = Depends(get_current_user),
                    db: Session = Depends(get_db)):
    try:
        auth.change_password(db, user["id"], body.current_password, body.new_password)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return {"ok": True}


@app.get("/api/settings/account", response_model=schemas.AccountSummary)
def account_settings(user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    return account.account_summary(db, user["id"])


@app.get("/api/settings/account/export")
def export_account(group_ids: list[str] | None = Query(None),
                   user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    return account.export_account(db, user["id"], group_ids)


@app.delete("/api/settings/account")
def delete_account(response: Response, user: dict = Depends(get_current_user),
                   db: Session = Depends(get_db)):
    account.delete_account(db, user["id"])
    response.delete_cookie(SESSION_COOKIE)
    return {"ok": True}


# ── i18n ──

@app.get("/api/i18n/messages")
def messages(request: Request, namespace: str | None = None,
             user: dict | None = Depends(get_optional_user), db: Session = Depends(get_db)):
    """Locale resolved for this request plus its message catalog (or one namespace of it)."""
    locale = i18n.get_user_locale(
        db, user["id"] if user else None,
        cookie_locale=request.cookies.get(i18n.LOCALE_COOKIE),
        accept_language=request.headers.get("accept-language"),
    )
    catalog = i18n.load_messages(locale)
    if namespace:
        catalog = catalog.get(namespace, {})
    return {"locale": locale, "messages": catalog}
