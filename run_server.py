"""
Wrapper script for running the server without the CLI.
"""

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("catalog:app", host="0.0.0.0", port=8000)
