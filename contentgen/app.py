# ============================================================
# contentgen FastAPI App
# ------------------------------------------------------------
# This app wires everything together:
#   - Dual search engines (Tavily / Exa) with one fallback
#   - Article generation via OpenAI-compatible or Gemini clients
#   - Context-bound chat sessions
#   - Markdown saving + publishing through an external CLI
# ============================================================

from __future__ import annotations

import logging
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

# --- Local imports ---
from contentgen import __version__
from contentgen.errors import ContentGenError
from contentgen.generate import ArticleData, ArticleGenerator, GenerationOptions, SessionRegistry, create_session
from contentgen.generate.clients import build_model_client
from contentgen.generate.types import DEFAULT_PROVIDER
from contentgen.pipeline import ArticlePipeline, ArticleStore
from contentgen.publish import Publisher
from contentgen.search import ContextFetcher, build_providers
from contentgen.settings import Settings, settings
from contentgen.storage import MarkdownStore

# ------------------------------------------------------------
# 📝 Logging
# ------------------------------------------------------------
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
)
for _name in ("httpx", "httpcore", "openai", "urllib3", "google_genai"):
    logging.getLogger(_name).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

CHAT_APOLOGY = "抱歉，连接出现了一点问题。"
CHAT_EMPTY_REPLY = "无法回答此问题。"

# Extra seconds the publish route waits beyond PUBLISH_TIMEOUT for a queued job.
PUBLISH_WAIT_MARGIN = 5.0

# ------------------------------------------------------------
# 🎛️ Presets (what the console offers in its dropdowns)
# ------------------------------------------------------------
AUDIENCE_PRESETS = [
    {"label": "泛科技读者 (一般)", "value": "泛科技读者, 背景知识一般, 关注点优先级: 行业应用 > 技术特性, 语气自然, 行话密度中"},
    {"label": "专业工程师 (深度)", "value": "资深工程师, 背景知识专业, 关注点优先级: 技术特性 > 如何实现, 语气冷静客观, 行话密度高"},
    {"label": "小学老师 (入门)", "value": "小学老师, 背景知识入门, 关注点优先级: 行业应用 > 技术特性, 语气亲切自然, 行话密度低"},
    {"label": "初中老师 (一般)", "value": "初中老师, 背景知识一般, 关注点优先级: 行业应用 > 技术特性, 语气专业冷静, 行话密度中"},
    {"label": "高中老师 (专业)", "value": "高中老师, 背景知识专业, 关注点优先级: 行业应用 > 技术特性, 语气专业冷静, 行话密度中"},
    {"label": "产品经理 (商业)", "value": "产品经理, 背景知识一般, 关注点优先级: 市场与生态 > 行业应用, 语气专业冷静, 行话密度中"},
    {"label": "券商分析师 (严谨)", "value": "券商分析师, 背景知识专业, 关注点优先级: 市场与生态 > 合规与风险, 语气专业冷静, 行话密度中"},
]

STYLE_PRESETS = [
    {"label": "科普 + 故事开场 (默认)", "value": "科普+故事开场"},
    {"label": "新闻快讯", "value": "新闻快讯"},
    {"label": "深度解析", "value": "深度解析"},
    {"label": "案例研究", "value": "案例研究"},
    {"label": "数据观察", "value": "数据观察"},
    {"label": "访谈纪要", "value": "访谈纪要"},
    {"label": "时间线", "value": "时间线"},
    {"label": "事实核查", "value": "事实核查"},
    {"label": "行业简报", "value": "行业简报"},
    {"label": "产品测评", "value": "产品测评"},
    {"label": "半佛体 (Banfo)", "value": "半佛体（Banfo）"},
]

LENGTH_PRESETS = [
    {"label": "500-800 字 (默认)", "value": "500-800"},
    {"label": "≤ 500 字 (精简)", "value": "≤500"},
    {"label": "800-1200 字 (深度)", "value": "800-1200"},
]

ENGINE_PRESETS = [
    {"label": "Tavily (推荐)", "value": "Tavily"},
    {"label": "Exa (神经搜索)", "value": "Exa"},
]

PROVIDER_PRESETS = [
    {"label": "OpenAI 兼容", "value": "OpenAI"},
    {"label": "Gemini", "value": "Gemini"},
]

# ------------------------------------------------------------
# 🔧 Service wiring
# ------------------------------------------------------------
@dataclass
class Services:
    settings: Settings
    client_factory: Callable[[str], Any]
    pipeline: ArticlePipeline
    store: ArticleStore
    sessions: SessionRegistry
    markdown: MarkdownStore
    publisher: Publisher


def build_services(cfg: Settings) -> Services:
    def client_factory(provider: str):
        return build_model_client(provider, cfg)

    fetcher = ContextFetcher(build_providers(cfg))
    markdown = MarkdownStore(cfg.OUTPUT_DIR)
    return Services(
        settings=cfg,
        client_factory=client_factory,
        pipeline=ArticlePipeline(fetcher, ArticleGenerator(client_factory), covers=cfg.COVER_IMAGES),
        store=ArticleStore(),
        sessions=SessionRegistry(),
        markdown=markdown,
        publisher=Publisher(
            markdown,
            cfg.PUBLISH_COMMAND,
            timeout=cfg.PUBLISH_TIMEOUT,
            max_jobs=cfg.PUBLISH_MAX_JOBS,
        ),
    )


services = build_services(settings)

# ------------------------------------------------------------
# 🚀 FastAPI init
# ------------------------------------------------------------
app = FastAPI(title="contentgen API", version=__version__)


@app.exception_handler(ContentGenError)
def handle_contentgen_error(request: Request, exc: ContentGenError):
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, type(exc).__name__, exc)
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


# ------------------------------------------------------------
# 📦 Pydantic models
# ------------------------------------------------------------
class SearchRequest(BaseModel):
    keyword: str = Field(..., min_length=1)
    engine: str = "Tavily"

class SourceOut(BaseModel):
    title: str
    uri: str

class SearchResponse(BaseModel):
    text: str
    sources: List[SourceOut]
    engine: str

class GenerateRequest(BaseModel):
    keyword: str = Field(..., min_length=1)
    audience: str = Field(default=AUDIENCE_PRESETS[0]["value"], min_length=1)
    length: str = Field(default=LENGTH_PRESETS[0]["value"], min_length=1)
    style: str = Field(default=STYLE_PRESETS[0]["value"], min_length=1)
    engine: str = Field(default="Tavily", min_length=1)
    provider: str = Field(default=DEFAULT_PROVIDER, min_length=1)

    def options(self) -> GenerationOptions:
        return GenerationOptions(
            audience=self.audience,
            length=self.length,
            style=self.style,
            engine=self.engine,
            provider=self.provider,
        )

class TextGenerateRequest(GenerateRequest):
    text: str = Field(..., min_length=1)

class ArticleOut(BaseModel):
    title: str
    content: str
    sources: List[SourceOut]

class ChatSessionRequest(BaseModel):
    topic: Optional[str] = None
    context: Optional[str] = None
    provider: str = DEFAULT_PROVIDER

class ChatSessionOut(BaseModel):
    session_id: str

class ChatTurnRequest(BaseModel):
    message: str = Field(..., min_length=1)

class ChatTurnOut(BaseModel):
    text: str

class ChatTurn(BaseModel):
    role: str
    text: str

class ChatHistoryOut(BaseModel):
    messages: List[ChatTurn]

class SaveRequest(BaseModel):
    content: str = ""

class SaveResponse(BaseModel):
    filename: str
    path: str

class PublishRequest(BaseModel):
    filename: str
    appId: str = ""
    appSecret: str = ""

class ParseDocumentRequest(BaseModel):
    pdfUrl: str = Field(..., min_length=1)
    prompt: str = Field(..., min_length=1)

class ParseDocumentResponse(BaseModel):
    success: bool
    text: str

class ConfigResponse(BaseModel):
    appId: str
    appSecret: str


def _article_out(article: ArticleData) -> Dict[str, Any]:
    return {
        "title": article.title,
        "content": article.content,
        "sources": [asdict(s) for s in article.sources],
    }


# ------------------------------------------------------------
# 🔎 Search-only route
# ------------------------------------------------------------
@app.post("/api/search", response_model=SearchResponse)
def search(req: SearchRequest):
    try:
        ctx = services.pipeline.fetch(req.keyword, req.engine)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"text": ctx.text, "sources": [asdict(s) for s in ctx.sources], "engine": ctx.engine}


# ------------------------------------------------------------
# ✍️ Article generation routes
# ------------------------------------------------------------
@app.post("/api/articles", response_model=ArticleOut)
def generate_article(req: GenerateRequest):
    ticket = services.store.begin()
    try:
        article = services.pipeline.run(req.keyword, req.options())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _article_out(services.store.commit(ticket, article))


@app.post("/api/articles/from-text", response_model=ArticleOut)
def generate_article_from_text(req: TextGenerateRequest):
    ticket = services.store.begin()
    article = services.pipeline.run_from_text(req.keyword, req.text, req.options())
    return _article_out(services.store.commit(ticket, article))


@app.get("/api/articles/current", response_model=ArticleOut)
def current_article():
    article = services.store.current
    if article is None:
        raise HTTPException(status_code=404, detail="No article generated yet")
    return _article_out(article)


# ------------------------------------------------------------
# 💬 Chat routes
# ------------------------------------------------------------
@app.post("/api/chat/sessions", response_model=ChatSessionOut)
def open_chat_session(req: ChatSessionRequest):
    topic, context = req.topic, req.context
    if not topic or not context:
        article = services.store.current
        if article is None:
            raise HTTPException(status_code=400, detail="No article to chat about")
        topic, context = topic or article.title, context or article.content
    client = services.client_factory(req.provider)
    session_id = services.sessions.add(create_session(topic, context, client))
    return {"session_id": session_id}


@app.get("/api/chat/sessions/{session_id}/messages", response_model=ChatHistoryOut)
def chat_history(session_id: str):
    session = services.sessions.get(session_id)
    return {"messages": [asdict(m) for m in session.messages()]}


@app.post("/api/chat/sessions/{session_id}/messages", response_model=ChatTurnOut)
def chat_turn(session_id: str, req: ChatTurnRequest):
    session = services.sessions.get(session_id)
    try:
        reply = session.send_message(req.message)
    except Exception as e:
        logger.warning("Chat turn failed in session %s: %s", session_id, e)
        return {"text": CHAT_APOLOGY}
    return {"text": reply.text or CHAT_EMPTY_REPLY}


@app.delete("/api/chat/sessions/{session_id}")
def close_chat_session(session_id: str):
    services.sessions.remove(session_id)
    return {"ok": True}


# ------------------------------------------------------------
# 💾 Save / publish routes
# ------------------------------------------------------------
@app.post("/api/save-markdown", response_model=SaveResponse)
def save_markdown(req: SaveRequest):
    saved = services.markdown.save(req.content)
    return asdict(saved)


@app.post("/api/publish")
def publish(req: PublishRequest):
    app_id = req.appId or services.settings.WECHAT_APP_ID
    app_secret = req.appSecret or services.settings.WECHAT_APP_SECRET
    job = services.publisher.submit(req.filename, app_id, app_secret)
    try:
        result = job.result(timeout=services.publisher.timeout + PUBLISH_WAIT_MARGIN)
    except FutureTimeout:
        # still queued or running; the caller polls /api/publish/{job_id}
        logger.info("Publish job %s still pending after wait, returning 202", job.job_id)
        return JSONResponse(status_code=202, content={"jobId": job.job_id, "done": False})
    body = {**result.to_dict(), "jobId": job.job_id}
    return JSONResponse(status_code=200 if result.success else 502, content=body)


@app.get("/api/publish/{job_id}")
def publish_status(job_id: str):
    job = services.publisher.get(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Publish job not found: {job_id}")
    if not job.done:
        return {"jobId": job_id, "done": False}
    return {"jobId": job_id, "done": True, **job.result().to_dict()}


@app.get("/api/config", response_model=ConfigResponse)
def publish_config():
    return {"appId": services.settings.WECHAT_APP_ID, "appSecret": services.settings.WECHAT_APP_SECRET}


# ------------------------------------------------------------
# 📄 Document parsing route
# ------------------------------------------------------------
@app.post("/api/parse-document", response_model=ParseDocumentResponse)
def parse_document(req: ParseDocumentRequest):
    client = services.client_factory("Gemini")
    text = client.parse_document(req.pdfUrl, req.prompt)
    return {"success": True, "text": text}


# ------------------------------------------------------------
# 🎛️ Presets
# ------------------------------------------------------------
@app.get("/api/presets")
def presets():
    return {
        "audiences": AUDIENCE_PRESETS,
        "styles": STYLE_PRESETS,
        "lengths": LENGTH_PRESETS,
        "engines": ENGINE_PRESETS,
        "providers": PROVIDER_PRESETS,
    }


# ------------------------------------------------------------
# 🧭 Health checks
# ------------------------------------------------------------
@app.get("/healthz")
def healthz():
    return {
        "ok": True,
        "env": services.settings.ENV,
        "debug": services.settings.DEBUG,
        "app": services.settings.app_name,
    }

@app.get("/health")
def health():
    return {"status": "ok", "env": services.settings.ENV}

@app.get("/")
def hello():
    return {"message": "contentgen service running."}
