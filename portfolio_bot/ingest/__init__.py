# Ingestion: scrape/read biography sources, chunk, embed, load the collection.
