# Cloud Functions entry point: the HTTP API plus the background triggers.
import asyncio

from firebase_functions import firestore_fn, https_fn, identity_fn, scheduler_fn

from api import triggers
from api.main import wsgi_app


@https_fn.on_request()
def api(req: https_fn.Request) -> https_fn.Response:
    return https_fn.Response.from_app(wsgi_app, req.environ)


@firestore_fn.on_document_created(document="events/{eventId}")
def on_event_created(event: firestore_fn.Event[firestore_fn.DocumentSnapshot | None]) -> None:
    asyncio.run(triggers.on_event_created(event.params["eventId"]))


@firestore_fn.on_document_updated(document="events/{eventId}")
def on_event_updated(event: firestore_fn.Event[firestore_fn.Change[firestore_fn.DocumentSnapshot | None]]) -> None:
    asyncio.run(triggers.on_event_updated(event.params["eventId"]))


@firestore_fn.on_document_deleted(document="events/{eventId}")
def on_event_deleted(event: firestore_fn.Event[firestore_fn.DocumentSnapshot | None]) -> None:
    asyncio.run(triggers.on_event_deleted(event.params["eventId"]))


@identity_fn.before_user_created()
def on_user_created(event: identity_fn.AuthBlockingEvent) -> identity_fn.BeforeCreateResponse | None:
    # Blocking hook: returning None lets the account creation go ahead
    asyncio.run(triggers.on_user_created(event.data))
    return None


# Daily at 9 AM Pacific
@scheduler_fn.on_schedule(schedule="0 9 * * *", timezone=scheduler_fn.Timezone("America/Los_Angeles"))
def daily_recommendations(event: scheduler_fn.ScheduledEvent) -> None:
    asyncio.run(triggers.daily_recommendations())
