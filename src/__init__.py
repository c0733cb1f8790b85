"""Realty AI: the AI orchestration core of a multi-tenant real-estate platform.

Architecture Overview
=====================

Two entry points sit on top of a small set of provider adapters:

1. **Request dispatcher** — classifies a free-text request as ux-ui, logic or
   mixed with a keyword heuristic and sends it to the matching specialist
   (a design adapter and a logic adapter, each with its own system
   instruction). Mixed requests can ask for *collaboration*: both specialists
   answer in parallel and the logic adapter synthesizes a final decision.

2. **Property chatbot** — a bounded LangGraph StateGraph:

     agent → (tool calls?) → tools → finalize → END
     agent → (no tool calls?) → END

   At most two model calls per user turn. Tools search a tenant's units,
   fetch one unit's details, schedule a viewing (lead dedup + showing) and
   list hourly viewing slots. Every tool reads the tenant id from graph
   state, never from model-supplied arguments.

Key Design Decisions
--------------------
- **Providers**: LangChain chat models (Anthropic and OpenAI), one client per
  profile, built once by ``src/orchestrator.py`` and injected.
- **Failures**: model and transport errors surface as ``ProviderError``; tool
  failures become structured error payloads the model can read.
- **Storage**: a ``TenantStore`` protocol with an httpx client for the host
  platform's API and an in-memory store for local runs and tests.
- **Dual Interface**: FastAPI server (production) + CLI chat loop (development/testing).

Package Structure
-----------------
- ``src/ai/`` — classifier, provider adapters, collaboration, dispatcher
- ``src/chatbot.py`` — LangGraph StateGraph definition
- ``src/config.py`` — Centralized configuration from environment variables
- ``src/prompts.py`` — System instructions and prompt templates
- ``src/models.py`` — Unit, lead and showing records
- ``src/orchestrator.py`` — Composition root
- ``src/server.py`` — FastAPI application
- ``src/main.py`` — CLI chat interface
- ``src/services/`` — Tenant storage, cache, metrics
- ``src/tools/`` — Property tools and their registry
- ``src/api/`` — FastAPI routes and Pydantic schemas
"""
