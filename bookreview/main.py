#region imports
import uvicorn
from bookreview.apiapp import fastapiapp
from bookreview.Controllers import BookController, UserController  # noqa: F401  registers the routes
from bookreview.Helper.Settings import CFG

#endregion imports
app = fastapiapp

def run():
    # tables are created by the app lifespan on startup
    uvicorn.run("bookreview.main:app", host=CFG.host, port=CFG.port, reload=True)

if __name__ == "__main__":
    run()
