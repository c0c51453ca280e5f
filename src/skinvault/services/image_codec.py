"""
Bitmap codec and derivation recipes for skin textures.

Wraps Pillow for PNG decoding/encoding, region extraction, overlay
compositing and nearest-neighbour scaling. Every operation returns a new
image and never mutates its input, and encoding uses fixed options so
that identical bitmaps always produce byte-identical PNG output.

Texture layout (pixel coordinates, origin top-left):

- Face: 8x8 at (8, 8)
- Face overlay ("hat" layer): 8x8 at (40, 8), present only in the
  64x64 layout; legacy 64x32 skins have no overlay.
"""

from __future__ import annotations

from io import BytesIO

from PIL import Image, UnidentifiedImageError

from skinvault.exceptions import DecodeError, DimensionMismatchError
from skinvault.models.enums import RenderKind, TextureKind


# ---------------------------------------------------------------------------
# Accepted source geometries (width, height)
# ---------------------------------------------------------------------------
SKIN_SHAPES: tuple[tuple[int, int], ...] = ((64, 64), (64, 32))
CAPE_SHAPES: tuple[tuple[int, int], ...] = ((64, 32),)

TEXTURE_SHAPES: dict[TextureKind, tuple[tuple[int, int], ...]] = {
    TextureKind.SKIN: SKIN_SHAPES,
    TextureKind.CAPE: CAPE_SHAPES,
}

# ---------------------------------------------------------------------------
# Crop rectangles as (left, upper, right, lower)
# ---------------------------------------------------------------------------
FACE_RECT: tuple[int, int, int, int] = (8, 8, 16, 16)
FACE_OVERLAY_RECT: tuple[int, int, int, int] = (40, 8, 48, 16)

# ---------------------------------------------------------------------------
# Placeholder colours (RGBA)
# ---------------------------------------------------------------------------
AVATAR_PLACEHOLDER_COLOR: tuple[int, int, int, int] = (128, 128, 128, 255)
HEAD_PLACEHOLDER_COLOR: tuple[int, int, int, int] = (139, 69, 19, 255)

_PLACEHOLDER_COLORS: dict[RenderKind, tuple[int, int, int, int]] = {
    RenderKind.AVATAR: AVATAR_PLACEHOLDER_COLOR,
    RenderKind.HEAD: HEAD_PLACEHOLDER_COLOR,
}

_PNG_COMPRESS_LEVEL = 6


class ImageCodec:
    """PNG codec plus the fixed avatar and head derivation recipes."""

    # ------------------------------------------------------------------
    # Decode / encode
    # ------------------------------------------------------------------

    def decode(
        self,
        data: bytes,
        expected_shapes: tuple[tuple[int, int], ...] | None = None,
    ) -> Image.Image:
        """Decode PNG bytes into an RGBA bitmap.

        Parameters
        ----------
        data : bytes
            Raw PNG bytes.
        expected_shapes : tuple[tuple[int, int], ...] | None
            Accepted geometries. Checked against the header before any
            pixel data is decompressed.

        Returns
        -------
        Image.Image
            Fully loaded RGBA image.

        Raises
        ------
        DecodeError
            If the bytes are empty, not a PNG, or truncated/corrupt.
        DimensionMismatchError
            If ``expected_shapes`` is given and the header size is not one
            of them.
        """
        if not data:
            raise DecodeError("Empty image payload")

        try:
            with Image.open(BytesIO(data)) as img:
                if img.format != "PNG":
                    raise DecodeError(f"Expected PNG image, got {img.format}")
                if expected_shapes is not None and not self.validate_dimensions(
                    img, expected_shapes
                ):
                    width, height = img.size
                    raise DimensionMismatchError(width, height, expected_shapes)
                img.load()
                return img.convert("RGBA")
        except (DecodeError, DimensionMismatchError):
            raise
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
            raise DecodeError("Invalid PNG image", original_error=e) from e
        except Image.DecompressionBombError as e:
            raise DecodeError("Image is too large to decode", original_error=e) from e

    def encode(self, bitmap: Image.Image) -> bytes:
        """Encode a bitmap as PNG with fixed options."""
        buffer = BytesIO()
        bitmap.save(
            buffer,
            format="PNG",
            optimize=False,
            compress_level=_PNG_COMPRESS_LEVEL,
        )
        return buffer.getvalue()

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    @staticmethod
    def validate_dimensions(
        bitmap: Image.Image, expected_shapes: tuple[tuple[int, int], ...]
    ) -> bool:
        """Return True if the bitmap size is one of ``expected_shapes``."""
        return bitmap.size in expected_shapes

    @staticmethod
    def crop_region(
        bitmap: Image.Image, rect: tuple[int, int, int, int]
    ) -> Image.Image:
        """Extract a rectangular region as a new image.

        Parameters
        ----------
        bitmap : Image.Image
            Source image (not modified).
        rect : tuple[int, int, int, int]
            ``(left, upper, right, lower)`` box.

        Raises
        ------
        ValueError
            If the box is empty or extends past the image bounds.
        """
        left, upper, right, lower = rect
        width, height = bitmap.size
        if not (0 <= left < right <= width and 0 <= upper < lower <= height):
            raise ValueError(f"Crop box {rect} is outside a {width}x{height} image")
        return bitmap.crop(rect)

    @staticmethod
    def composite_overlay(
        base: Image.Image, overlay: Image.Image, alpha_blend: bool = True
    ) -> Image.Image:
        """Draw ``overlay`` over ``base`` and return the result.

        With ``alpha_blend`` the overlay is composited with Porter-Duff
        "over". Without it, every overlay pixel that is not fully
        transparent replaces the base pixel.
        """
        if base.size != overlay.size:
            raise ValueError(
                f"Overlay size {overlay.size} does not match base size {base.size}"
            )
        base = base.convert("RGBA")
        overlay = overlay.convert("RGBA")

        if alpha_blend:
            return Image.alpha_composite(base, overlay)

        result = base.copy()
        mask = overlay.getchannel("A").point(lambda a: 255 if a else 0)
        result.paste(overlay, (0, 0), mask)
        return result

    @staticmethod
    def scale(bitmap: Image.Image, size: int) -> Image.Image:
        """Scale to a ``size`` x ``size`` square with nearest-neighbour sampling."""
        return bitmap.resize((size, size), Image.Resampling.NEAREST)

    # ------------------------------------------------------------------
    # Derivation recipes
    # ------------------------------------------------------------------

    def apply_recipe(self, kind: RenderKind, skin: Image.Image) -> Image.Image:
        """Build the unscaled 8x8 render for ``kind`` from a skin bitmap.

        ``avatar`` is the bare face. ``head`` additionally composites the
        face overlay when the skin uses the 64x64 layout.
        """
        face = self.crop_region(skin, FACE_RECT)
        if kind == RenderKind.HEAD and skin.size == (64, 64):
            overlay = self.crop_region(skin, FACE_OVERLAY_RECT)
            face = self.composite_overlay(face, overlay, alpha_blend=True)
        return face

    def derive(self, kind: RenderKind, skin: Image.Image, size: int) -> bytes:
        """Run the recipe for ``kind``, scale to ``size`` and encode."""
        return self.encode(self.scale(self.apply_recipe(kind, skin), size))

    # ------------------------------------------------------------------
    # Upload validation
    # ------------------------------------------------------------------

    def validate_texture(self, kind: TextureKind, data: bytes) -> Image.Image:
        """Decode an uploaded texture and check its geometry.

        Parameters
        ----------
        kind : TextureKind
            Skin (64x64 or 64x32) or cape (64x32).
        data : bytes
            Uploaded bytes.

        Returns
        -------
        Image.Image
            The decoded bitmap.

        Raises
        ------
        DecodeError
            If the bytes are not a readable PNG.
        DimensionMismatchError
            If the geometry is wrong for ``kind``.
        """
        return self.decode(data, TEXTURE_SHAPES[kind])

    # ------------------------------------------------------------------
    # Placeholders
    # ------------------------------------------------------------------

    def placeholder(self, kind: RenderKind, size: int) -> bytes:
        """Return the flat-colour placeholder PNG for ``kind`` at ``size``."""
        color = _PLACEHOLDER_COLORS[kind]
        return self.encode(Image.new("RGBA", (size, size), color))
