# Portfolio chatbot service: FastAPI app + RAG answer pipeline.
