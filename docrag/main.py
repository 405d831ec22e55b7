"""Quart application exposing semantic search to agents and tools."""
import logging

from quart import Quart, request, jsonify
import structlog

from docrag import config
from docrag.errors import CorruptionError, InputError, ProviderError, StoreError
from docrag.rag.retriever import Retriever
from docrag.rag.store_sqlite import SQLiteVectorStore
from docrag.voyage_client import VoyageClient


def configure_logging(level: str = None) -> None:
    """Configure structured JSON logging for entry points."""
    logging.basicConfig(level=level or config.LOG_LEVEL, format="%(message)s")
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


logger = structlog.get_logger()


def create_app(retriever: Retriever = None) -> Quart:
    """Build the Quart app.

    Args:
        retriever: Retriever to serve. If omitted, a store and Voyage client
            are built from config when the server starts and the store is
            closed when it stops.
    """
    app = Quart(__name__)
    state = {"retriever": retriever, "owned_store": None}

    @app.before_serving
    async def startup():
        if state["retriever"] is None:
            store = SQLiteVectorStore()
            store.initialize()
            state["owned_store"] = store
            state["retriever"] = Retriever(store=store, embedder=VoyageClient())
            logger.info("search_service_started", db_path=str(store.db_path))

    @app.after_serving
    async def shutdown():
        if state["owned_store"] is not None:
            state["owned_store"].close()
            state["owned_store"] = None
            state["retriever"] = None
            logger.info("search_service_stopped")

    @app.route("/api/search", methods=["POST"])
    async def search():
        """Semantic search over ingested documents.

        Expects JSON body:
        {
            "query": "search text",
            "top_k": 5  // optional, defaults to config.RETRIEVAL_TOP_K
        }

        Returns JSON:
        {
            "query": "search text",
            "results": [{"content", "filename", "chunk_index", "similarity"}, ...]
        }
        """
        data = await request.get_json(silent=True)

        if not isinstance(data, dict) or "query" not in data:
            raise InputError("Missing 'query' in request body")

        query = data["query"]
        top_k = data.get("top_k")

        if not isinstance(query, str):
            raise InputError("'query' must be a string")

        if top_k is not None and (isinstance(top_k, bool) or not isinstance(top_k, int)):
            raise InputError("'top_k' must be an integer")

        results = await state["retriever"].search(query, top_k=top_k)

        return jsonify({
            "query": query,
            "results": [result.to_dict() for result in results],
        })

    @app.route("/api/stats")
    async def stats():
        """Vector store statistics."""
        return jsonify(state["retriever"].store.get_stats())

    @app.route("/health/ready")
    async def health_ready():
        """Readiness probe - check the store is reachable."""
        checks = {"status": "healthy", "store": "ok"}

        if state["retriever"] is None:
            checks["status"] = "starting"
            checks["store"] = "not initialized"
            return jsonify(checks), 503

        try:
            state["retriever"].store.count()
            return jsonify(checks), 200
        except StoreError as e:
            logger.error("health_check_failed", error=str(e))
            checks["status"] = "unhealthy"
            checks["store"] = "unavailable"
            return jsonify(checks), 503

    @app.route("/health/live")
    async def health_live():
        """Liveness probe - check if app is running."""
        return jsonify({"status": "alive"}), 200

    @app.errorhandler(InputError)
    async def input_error(error):
        logger.warning("invalid_request", error=str(error))
        return jsonify({"error": str(error)}), 400

    @app.errorhandler(ProviderError)
    async def provider_error(error):
        logger.error(
            "embedding_provider_failed", error=str(error), status_code=error.status_code
        )
        return jsonify({"error": "Embedding provider error"}), 502

    @app.errorhandler(CorruptionError)
    async def corruption_error(error):
        logger.error(
            "stored_embedding_corrupted",
            error=str(error),
            record_id=error.record_id,
            byte_length=error.byte_length,
        )
        return jsonify({"error": "Stored embeddings are corrupted"}), 500

    @app.errorhandler(StoreError)
    async def store_error(error):
        logger.error("vector_store_failed", error=str(error))
        return jsonify({"error": "Vector store error"}), 500

    @app.errorhandler(404)
    async def not_found(error):
        """Handle 404 errors."""
        return jsonify({"error": "Not found"}), 404

    return app


app = create_app()


if __name__ == "__main__":
    configure_logging()
    app.run(host="0.0.0.0", port=5000)
