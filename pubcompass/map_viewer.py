"""Interactive HTML map of a nearby pub search."""

import html

import folium
from folium import plugins

from .geo import format_distance
from .models import GeoPoint, PointOfInterest


def create_pub_map(origin: GeoPoint, pubs: list[PointOfInterest],
                   radius_meters: float) -> folium.Map:
    """Create a map showing the search area and every pub found."""
    m = folium.Map(
        location=[origin.latitude, origin.longitude],
        zoom_start=15,
        tiles="CartoDB positron"
    )

    folium.TileLayer("OpenStreetMap", name="OpenStreetMap").add_to(m)
    folium.TileLayer("CartoDB dark_matter", name="Dark Mode").add_to(m)

    folium.Circle(
        [origin.latitude, origin.longitude],
        radius=radius_meters,
        color="#2a9d8f",
        weight=2,
        fill=True,
        fill_opacity=0.05,
        popup=f"Search radius {format_distance(radius_meters)}"
    ).add_to(m)

    folium.Marker(
        [origin.latitude, origin.longitude],
        popup="You are here",
        icon=folium.Icon(color="blue", icon="user")
    ).add_to(m)

    pubs_layer = folium.FeatureGroup(name="Pubs", show=True)
    for rank, pub in enumerate(pubs):
        name = html.escape(pub.name)
        popup_text = f"""
            <b>{name}</b><br>
            {format_distance(pub.distance_meters)} away<br>
            <i>OSM id {pub.id}</i>
        """
        folium.Marker(
            [pub.latitude, pub.longitude],
            popup=folium.Popup(popup_text, max_width=200),
            tooltip=name,
            icon=folium.Icon(color="orange" if rank == 0 else "gray", icon="glass")
        ).add_to(pubs_layer)

    if pubs:
        nearest = pubs[0]
        folium.PolyLine(
            [[origin.latitude, origin.longitude], [nearest.latitude, nearest.longitude]],
            weight=3,
            color="#e76f51",
            opacity=0.8,
            dash_array="6",
            popup=f"Nearest: {html.escape(nearest.name)}"
        ).add_to(pubs_layer)

    pubs_layer.add_to(m)
    folium.LayerControl().add_to(m)
    plugins.Fullscreen().add_to(m)

    return m
