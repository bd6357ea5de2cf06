import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
        # Uploaded listing photos should not trigger reloads
        reload_excludes=["media/*", "media/property_images/*"]
    )
