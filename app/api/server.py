### --- standard + typing utilities --- ###
import logging
from contextlib import asynccontextmanager
from typing import Optional

### --- third-party libraries --- ###
import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request

### --- project imports --- ###
from app.agent.service import AgentService, build_agent
from app.config import settings, Settings
from app.domain.schemas import CommandIn, CommandOut, TaskIn, TaskOut
from app.errors import CollaboratorError

SERVICE_NAME = "task-agent"
VERSION = "1.0.0"
ENDPOINTS = ["GET /health", "GET /status", "POST /schedule", "POST /email", "POST /nlp"]

logger = logging.getLogger(__name__)

def configure_logging(level: str = settings.log_level) -> None:
    """Root logging config for the service process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

### -------------------------- App factory --------------------------------- ###

def create_app(agent: Optional[AgentService] = None, config: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI app around one AgentService.
    Inputs:
        agent: prebuilt service (tests); built from config at startup when omitted.
        config: Settings used to build the agent (module settings by default).
    The lifespan configures logging, starts the agent's scheduler on startup and
    stops it on shutdown.
    """
    cfg = config or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # covers `uvicorn app.api.server:app` as well as run()
        configure_logging(cfg.log_level)
        if getattr(app.state, "agent", None) is None:
            app.state.agent = build_agent(cfg)
        app.state.agent.start()
        try:
            yield
        finally:
            app.state.agent.stop()

    app = FastAPI(title="Task Agent — Calendar + Gmail Orchestration", version=VERSION, lifespan=lifespan)
    app.state.agent = agent

    def get_agent(request: Request) -> AgentService:
        """Agent held on app.state."""
        found = request.app.state.agent
        if found is None:
            raise HTTPException(503, "agent not started")
        return found

    ### --- endpoints --- ###

    @app.get("/health")
    def health():
        """Health probe."""
        return {"status": "healthy", "service": SERVICE_NAME, "version": VERSION}

    @app.get("/status")
    def status(agent: AgentService = Depends(get_agent)):
        """Service + scheduler state and the endpoint list."""
        return {
            "status": "running",
            "service": SERVICE_NAME,
            "scheduler_running": agent.scheduler.running,
            "endpoints": ENDPOINTS,
        }

    def _run_task(agent: AgentService, inp: TaskIn, label: str) -> TaskOut:
        task = (inp.task or "").strip()
        if not task:
            raise HTTPException(400, "task is required")
        try:
            outcome = agent.process_task(task)
        except CollaboratorError as e:
            raise HTTPException(500, f"Failed to process {label}: {e}")
        return TaskOut(
            message=f"{label.capitalize()} processed successfully",
            task=task,
            type=outcome.request.type,
            request=outcome.request,
            advisory=outcome.advisory,
        )

    @app.post("/schedule", response_model=TaskOut)
    def schedule(inp: TaskIn, agent: AgentService = Depends(get_agent)):
        """Classify + route a task (any type). Inputs: TaskIn."""
        return _run_task(agent, inp, "task")

    @app.post("/email", response_model=TaskOut)
    def email(inp: TaskIn, agent: AgentService = Depends(get_agent)):
        """Same pipeline as /schedule, kept as a separate route for email clients."""
        return _run_task(agent, inp, "email task")

    @app.post("/nlp", response_model=CommandOut)
    def nlp(inp: CommandIn, agent: AgentService = Depends(get_agent)):
        """Advisory LLM reply only; nothing is classified or dispatched."""
        command = (inp.command or "").strip()
        if not command:
            raise HTTPException(400, "command is required")
        try:
            reply = agent.process_command(command)
        except CollaboratorError as e:
            raise HTTPException(500, f"Failed to process NLP command: {e}")
        return CommandOut(response=reply, command=command)

    return app

app = create_app()

def run() -> None:
    """Console entry point: uvicorn on SERVER_HOST:SERVER_PORT."""
    configure_logging()
    logger.info("Starting HTTP server on %s:%s (dry_run=%s)", settings.server_host, settings.server_port, settings.dry_run)
    uvicorn.run(app, host=settings.server_host, port=settings.server_port)

if __name__ == "__main__":
    run()

### ---------------------- curl examples ---------------------------- ###
"""
# Health
curl -s localhost:8080/health

# Tasks
curl -sX POST localhost:8080/schedule -H "content-type: application/json" \
  -d '{"task":"Schedule a meeting with alice@example.com tomorrow at 2pm for 1 hour about \"Q3 Planning\""}'

curl -sX POST localhost:8080/email -H "content-type: application/json" \
  -d '{"task":"Send an email to bob@example.com saying the report is ready"}'

# Advisory reply only
curl -sX POST localhost:8080/nlp -H "content-type: application/json" \
  -d '{"command":"What should I prepare for tomorrow?"}'
"""
