# recipes/api/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from recipes.api.views import MenuProductViewSet, ProductAddonViewSet, RecipeLineViewSet

router = DefaultRouter()
router.register(r"products", MenuProductViewSet, basename="menu-products")
router.register(r"recipe-lines", RecipeLineViewSet, basename="recipe-lines")
router.register(r"addons", ProductAddonViewSet, basename="product-addons")

urlpatterns = [
    path("", include(router.urls)),
]
