# main.py (checkout API + kitchen websocket)
from dotenv import load_dotenv
load_dotenv()

import json, logging, os
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import BackgroundTasks, FastAPI, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from app.logging_hooks import configure_logging
from state import Clock, OrderStore, orders_to_json, utc_now_iso
from utils.config import LOG_LEVEL, Settings
from utils.db import OrderWriter
from utils.kitchen import KitchenHub
from utils.pos import CheckoutService
from utils.reports import report_for
from utils.validation import CheckoutError

log = logging.getLogger("pos.main")

CHECKOUT_OK = "Order processed successfully"
CHECKOUT_FAILED = "Error processing order"


def create_app(settings: Optional[Settings] = None, clock: Clock = utc_now_iso) -> FastAPI:
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("[Startup] POS server running at http://%s:%s", settings.host, settings.port)
        log.info("[Startup] sales report: http://%s:%s/sales-report", settings.host, settings.port)
        log.info("[Startup] orders dir=%s max_orders=%s", settings.orders_dir, settings.max_orders)
        yield
        await app.state.hub.close_all()

    app = FastAPI(title="POS order intake", lifespan=lifespan)

    # ---- per-app state (no module globals) -------------------------
    store = OrderStore(capacity=settings.max_orders, base=settings.order_base)
    hub = KitchenHub(store.list, send_timeout=settings.kitchen_send_timeout)
    app.state.settings = settings
    app.state.clock = clock
    app.state.store = store
    app.state.hub = hub
    app.state.writer = OrderWriter(settings.orders_dir)
    app.state.checkout = CheckoutService(store, hub, clock=clock)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---- pages (content lives elsewhere) ---------------------------
    def _page(name: str):
        path = os.path.join(settings.public_dir, name)
        if not os.path.isfile(path):
            return JSONResponse({"success": False, "message": f"{name} not found"}, status_code=404)
        return FileResponse(path)

    @app.get("/")
    def index():
        return _page("index.html")

    @app.get("/kitchen")
    def kitchen_page():
        return _page("kitchen.html")

    # ---- checkout ---------------------------------------------------
    async def checkout(request: Request, background: BackgroundTasks):
        try:
            raw = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            log.warning("[Checkout] unreadable body: %s", e)
            return JSONResponse({"success": False, "message": CHECKOUT_FAILED}, status_code=400)
        try:
            order = await app.state.checkout.checkout(raw)
        except CheckoutError as e:
            log.warning("[Checkout] rejected: %s %s", e, e.errors)
            return JSONResponse({"success": False, "message": CHECKOUT_FAILED}, status_code=400)

        # fire-and-forget: runs after the response is sent
        background.add_task(app.state.writer.persist, order)
        return {"success": True, "orderNumber": order.orderNumber, "message": CHECKOUT_OK}

    app.add_api_route("/checkout", checkout, methods=["POST"])
    app.add_api_route("/api/checkout", checkout, methods=["POST"])

    # ---- reports / listing -----------------------------------------
    def sales_report(date: Optional[str] = Query(None)):
        return report_for(store.list(), app.state.clock(), date)

    app.add_api_route("/sales-report", sales_report, methods=["GET"])
    app.add_api_route("/api/sales-report", sales_report, methods=["GET"])

    @app.get("/api/orders")
    def list_orders():
        orders = store.list()
        return {"success": True, "count": len(orders), "orders": orders_to_json(orders)}

    @app.post("/api/clear-orders")
    def clear_orders():
        store.reset()
        log.info("[Orders] cleared; next order number %s", store.peek_next())
        return {"success": True, "message": "All orders cleared"}

    @app.post("/api/orders/rebuild-daily")
    async def rebuild_daily(date: Optional[str] = Query(None)):
        key = date if date is not None else app.state.clock()[:10]
        try:
            orders = await app.state.writer.rebuild_daily(key)
        except ValueError:
            return JSONResponse({"success": False, "message": "date must be YYYY-MM-DD"}, status_code=400)
        except OSError as e:
            log.error("[Persist Error] rebuilding %s: %s", key, e)
            return JSONResponse({"success": False, "message": "Error rebuilding daily file"}, status_code=500)
        return {"success": True, "date": key, "count": len(orders)}

    @app.get("/healthz")
    def healthz():
        return {
            "ok": True,
            "orders": len(store),
            "subscribers": len(hub),
            "nextOrderNumber": store.peek_next(),
        }

    # ---- kitchen display websocket ---------------------------------
    @app.websocket("/ws/kitchen")
    async def ws_kitchen(ws: WebSocket):
        try:
            await hub.connect(ws)
            while True:
                frame = await ws.receive()
                if frame["type"] == "websocket.disconnect":
                    break
                text = frame.get("text")
                if text is None:
                    continue  # binary frames carry nothing for us
                try:
                    msg = json.loads(text)
                except json.JSONDecodeError:
                    continue  # displays only listen; ignore chatter
                if isinstance(msg, dict) and msg.get("type") == "ping":
                    await ws.send_json({"type": "pong"})
        except WebSocketDisconnect:
            pass
        finally:
            hub.disconnect(ws)

    return app


configure_logging(LOG_LEVEL)
app = create_app()

if __name__ == "__main__":
    uvicorn.run("main:app", host=app.state.settings.host, port=app.state.settings.port)
