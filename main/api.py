from ninja import NinjaAPI
from scrape.api import router as scrape_router

api = NinjaAPI()

api.add_router("/scrape/", scrape_router)

@api.get("/hc", auth=None)
def health_check(request):
    return 200
