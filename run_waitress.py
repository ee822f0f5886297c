# run_waitress.py
# Sirve la app Flask con Waitress (producción / Windows).
import os

from waitress import serve

from crmsync import create_app

if __name__ == "__main__":
    application = create_app()
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8000"))
    print(f"[Waitress] Sirviendo en http://{host}:{port}")
    serve(application, listen=f"{host}:{port}", threads=8)
